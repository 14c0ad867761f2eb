"""Data classes for API request/response schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass
class CommandRequest:
    """Command forwarded from the dashboard.

    action: "start", "stop", "confirm_ingredients" or "acknowledge".
    recipe_id: Optional recipe for "start"; the selected recipe otherwise.
    """

    action: str
    recipe_id: Optional[str] = None


@dataclass
class ReservationRequest:
    """Arm a reservation to finish at ``target_time``.

    target_time accepts an ISO datetime ("2026-10-20T07:30:00") or a time
    of day ("07:30").
    """

    target_time: str
    recipe_id: Optional[str] = None


@dataclass
class RecipeSelection:
    """Select the recipe for the next start."""

    recipe_id: str


@dataclass
class VibrationInjection:
    """Force the simulated vibration signal."""

    vibration: float


@dataclass
class SimulatorReset:
    """Reset the simulated vessel temperature."""

    temperature: Optional[float] = None


@dataclass
class CommandResponse:
    """Result of a dashboard command."""

    success: bool
    state: str
    message: str = ""


@dataclass
class SimulatorStatus:
    """Process model status response."""

    tick: int
    center_temp: float
    legacy_temp: float
    vibration: float
    heat_uniformity: float
    ambient_temp: float
    thermal_mass: float
    skipped_ticks: int


@dataclass
class WebSocketMessage:
    """Message sent over WebSocket."""

    type: str  # "snapshot", "state_update", "warning", "event"
    data: dict[str, Any]
    timestamp: datetime = field(default_factory=datetime.now)
