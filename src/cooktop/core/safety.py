"""Unattended-appliance automatic shutdown."""

from __future__ import annotations

import logging

from .session import CookingSession
from .states import CookingState

logger = logging.getLogger(__name__)


class SafetyAutoOff:
    """Forces a shutdown after the appliance sits unattended in COMPLETE.

    Counts ticks in COMPLETE on the session. Once the counter exceeds
    ``limit_ticks`` the caller must reset the session to IDLE with power 0.
    """

    def __init__(self, limit_ticks: int) -> None:
        """Initialize the auto-off guard.

        Args:
            limit_ticks: Ticks tolerated in COMPLETE (10 minutes at the
                control tick rate by default).
        """
        if limit_ticks < 0:
            raise ValueError("limit_ticks must be non-negative")
        self.limit_ticks = limit_ticks

    def update(self, session: CookingSession) -> bool:
        """Advance the dwell counter for one tick.

        Returns:
            True when the shutdown must be forced.
        """
        if session.state != CookingState.COMPLETE:
            session.auto_off_counter = 0
            return False
        session.auto_off_counter += 1
        if session.auto_off_counter > self.limit_ticks:
            logger.info(
                "Unattended for %d ticks after completion, forcing shutdown",
                session.auto_off_counter,
            )
            return True
        return False

    def acknowledge(self, session: CookingSession) -> None:
        session.auto_off_counter = 0
