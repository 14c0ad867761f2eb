"""Core cooking control logic."""

from .states import CookingState, CookingType
from .events import Event, EventType
from .fsm import CookingStateMachine
from .clock import SimulationClock
from .session import CookingSession, SessionSnapshot, VesselInfo

__all__ = [
    "CookingState",
    "CookingType",
    "Event",
    "EventType",
    "CookingStateMachine",
    "SimulationClock",
    "CookingSession",
    "SessionSnapshot",
    "VesselInfo",
]
