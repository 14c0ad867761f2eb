"""Deferred start scheduling for reserved recipes."""

from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Optional, Union

from ..config import ReservationConfig

TargetTime = Union[datetime, time]


class ReservationScheduler:
    """Computes when a reserved recipe must start to finish on time.

    ``start = target - (cook_duration + preheat_buffer)``. The preheat
    buffer approximates the time needed to reach the target temperature.
    The scheduler does no temperature math; at runtime it only compares
    the wall clock with the stored start time once per tick.
    """

    def __init__(self, config: Optional[ReservationConfig] = None) -> None:
        self.config = config or ReservationConfig()

    @property
    def preheat_buffer(self) -> timedelta:
        return timedelta(seconds=self.config.preheat_buffer_seconds)

    def resolve_target(self, target: TargetTime, now: datetime) -> datetime:
        """Turn a target into a future wall-clock datetime.

        A time of day is taken on today's date. A target carrying a UTC
        offset is converted to local wall-clock time when ``now`` is naive.
        A target that is not after ``now`` rolls forward by one day.
        """
        if isinstance(target, datetime):
            resolved = target
        else:
            resolved = datetime.combine(now.date(), target)
        if resolved.tzinfo is not None and now.tzinfo is None:
            resolved = resolved.astimezone().replace(tzinfo=None)
        elif resolved.tzinfo is None and now.tzinfo is not None:
            resolved = resolved.replace(tzinfo=now.tzinfo)
        if resolved <= now:
            resolved += timedelta(days=1)
        return resolved

    def compute_start_time(
        self,
        target: TargetTime,
        cook_duration: float,
        now: Optional[datetime] = None,
    ) -> datetime:
        """Compute the deferred start time.

        Args:
            target: Desired completion time (datetime or time of day).
            cook_duration: Recipe cook duration in seconds.
            now: Current wall-clock time. Defaults to datetime.now().

        Returns:
            Wall-clock time at which heating must begin.
        """
        if now is None:
            now = datetime.now()
        resolved = self.resolve_target(target, now)
        return resolved - (timedelta(seconds=cook_duration) + self.preheat_buffer)

    def is_due(self, start_time: Optional[datetime], now: datetime) -> bool:
        """Per-tick wall-clock check: has the start time been reached?"""
        if start_time is None:
            return False
        return now >= start_time
