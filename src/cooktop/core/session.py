"""Cooking session aggregate, sensor history and read-only snapshot."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator, Optional

from ..recipes import Recipe
from .states import CookingState, CookingType, VesselAlignment, VesselMaterial, VesselSize


@dataclass(frozen=True)
class VesselInfo:
    """Inferred vessel attributes, frozen once classified."""

    material: VesselMaterial = VesselMaterial.UNKNOWN
    size: VesselSize = VesselSize.MEDIUM
    alignment: VesselAlignment = VesselAlignment.CENTERED

    @property
    def is_known(self) -> bool:
        return self.material != VesselMaterial.UNKNOWN

    def to_dict(self) -> dict[str, str]:
        return {
            "material": self.material.value,
            "size": self.size.value,
            "alignment": self.alignment.value,
        }


@dataclass(frozen=True)
class SensorHistoryEntry:
    """One tick of telemetry kept for trend inference."""

    tick: int
    center_temp: float
    legacy_temp: float
    vibration: float
    power: int
    heat_uniformity: float
    sensor_array: tuple[float, ...]
    sound_frequency: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "center_temp": self.center_temp,
            "legacy_temp": self.legacy_temp,
            "vibration": self.vibration,
            "power": self.power,
            "heat_uniformity": self.heat_uniformity,
            "sensor_array": list(self.sensor_array),
            "sound_frequency": self.sound_frequency,
        }


class SensorHistory:
    """Bounded ring buffer of history entries; oldest evicted first."""

    def __init__(self, capacity: int = 60) -> None:
        if capacity < 1:
            raise ValueError("History capacity must be at least 1")
        self._entries: deque[SensorHistoryEntry] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, entry: SensorHistoryEntry) -> None:
        self._entries.append(entry)

    def clear(self) -> None:
        self._entries.clear()

    def first(self) -> Optional[SensorHistoryEntry]:
        return self._entries[0] if self._entries else None

    def last(self) -> Optional[SensorHistoryEntry]:
        return self._entries[-1] if self._entries else None

    def snapshot(self) -> tuple[SensorHistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SensorHistoryEntry]:
        return iter(self._entries)


@dataclass
class CookingSession:
    """Mutable session state owned by the state machine.

    This is the single source of truth for the cooking process. Other
    components receive values from it and return results; they never keep
    a copy.

    Attributes:
        state: Current lifecycle state.
        selected_recipe: Recipe chosen by the operator, kept across resets.
        power: Commanded coil power level (0..10).
        remaining_time: Cook time left in seconds.
        target_temperature: Effective target; auto-detect may adapt it.
        cooking_type: Inferred cooking process.
        vessel_info: Inferred vessel, frozen once known.
        reservation_start_time: Wall-clock start for a RESERVED session.
        auto_off_counter: Ticks spent unattended in COMPLETE.
        ingredients_added: Operator confirmed ingredients are in.
        recovery_ticks: Ticks left before a disturbance clears.
    """

    state: CookingState = CookingState.IDLE
    selected_recipe: Optional[Recipe] = None
    power: int = 0
    remaining_time: float = 0.0
    target_temperature: Optional[float] = None
    cooking_type: CookingType = CookingType.UNKNOWN
    vessel_info: VesselInfo = field(default_factory=VesselInfo)
    reservation_start_time: Optional[datetime] = None
    auto_off_counter: int = 0
    ingredients_added: bool = False
    recovery_ticks: int = 0

    def reset(self) -> None:
        """Return to Idle defaults, keeping only the recipe selection."""
        self.state = CookingState.IDLE
        self.power = 0
        self.remaining_time = 0.0
        self.target_temperature = None
        self.cooking_type = CookingType.UNKNOWN
        self.vessel_info = VesselInfo()
        self.reservation_start_time = None
        self.auto_off_counter = 0
        self.ingredients_added = False
        self.recovery_ticks = 0

    def begin(self, recipe: Recipe) -> None:
        """Initialize a fresh session for the given recipe."""
        self.reset()
        self.selected_recipe = recipe
        self.remaining_time = recipe.cook_duration
        self.target_temperature = recipe.target_temperature


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable read model published after every tick."""

    tick: int
    state: CookingState
    power: int
    remaining_time: float
    center_temp: float
    legacy_temp: float
    sensor_array: tuple[float, ...]
    vibration: float
    heat_uniformity: float
    cooking_type: CookingType
    vessel_info: VesselInfo
    target_temperature: Optional[float]
    recipe_id: Optional[str]
    reservation_start_time: Optional[datetime]
    auto_off_counter: int
    ingredients_added: bool
    history: tuple[SensorHistoryEntry, ...] = ()
    sound_frequency: float = 0.0

    def to_dict(self, include_history: bool = False) -> dict[str, Any]:
        """Convert snapshot to a JSON-compatible dictionary.

        Args:
            include_history: Also serialize the history buffer.
        """
        data: dict[str, Any] = {
            "tick": self.tick,
            "state": self.state.name,
            "power": self.power,
            "remaining_time": self.remaining_time,
            "center_temp": self.center_temp,
            "legacy_temp": self.legacy_temp,
            "sensor_array": list(self.sensor_array),
            "vibration": self.vibration,
            "sound_frequency": self.sound_frequency,
            "heat_uniformity": self.heat_uniformity,
            "cooking_type": self.cooking_type.name,
            "vessel_info": self.vessel_info.to_dict(),
            "target_temperature": self.target_temperature,
            "recipe_id": self.recipe_id,
            "reservation_start_time": (
                self.reservation_start_time.isoformat()
                if self.reservation_start_time else None
            ),
            "auto_off_counter": self.auto_off_counter,
            "ingredients_added": self.ingredients_added,
        }
        if include_history:
            data["history"] = [entry.to_dict() for entry in self.history]
        return data
