"""Event system for the cooking state machine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Optional


class EventType(Enum):
    """Types of events in the cooktop core."""

    # State machine events
    STATE_ENTER = auto()
    STATE_EXIT = auto()

    # Command events
    COMMAND_REJECTED = auto()
    RESERVATION_ARMED = auto()

    # Hazard events
    BOILOVER_PREDICTED = auto()
    DISTURBANCE_DETECTED = auto()
    HAZARD_CLEARED = auto()

    # Inference events
    COOKING_TYPE_DETECTED = auto()

    # Lifecycle events
    COOKING_COMPLETE = auto()
    AUTO_OFF = auto()


@dataclass
class Event:
    """Event data structure for the event system.

    Events are collected by the state machine during a tick and handed to
    listeners (WebSocket manager, logging) by the clock afterwards.

    Attributes:
        type: The type of event.
        timestamp: When the event occurred.
        data: Optional dictionary of event-specific data.
        source: Optional identifier for the event source.
    """

    type: EventType
    timestamp: datetime = field(default_factory=datetime.now)
    data: Optional[dict[str, Any]] = None
    source: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization."""
        return {
            "type": self.type.name,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
            "source": self.source,
        }


def state_enter_event(
    state_name: str,
    from_state: Optional[str] = None,
) -> Event:
    """Create a STATE_ENTER event.

    Args:
        state_name: Name of the state being entered.
        from_state: Name of the previous state, if any.

    Returns:
        State enter event.
    """
    return Event(
        type=EventType.STATE_ENTER,
        data={"state": state_name, "from_state": from_state},
        source="fsm",
    )


def state_exit_event(state_name: str) -> Event:
    """Create a STATE_EXIT event."""
    return Event(
        type=EventType.STATE_EXIT,
        data={"state": state_name},
        source="fsm",
    )


def command_rejected_event(command: str, state_name: str) -> Event:
    """Create a COMMAND_REJECTED event.

    Args:
        command: Name of the ignored command.
        state_name: State the machine was in.

    Returns:
        Command rejected event.
    """
    return Event(
        type=EventType.COMMAND_REJECTED,
        data={"command": command, "state": state_name},
        source="fsm",
    )


def hazard_event(
    event_type: EventType,
    vibration: float,
    center_temp: float,
) -> Event:
    """Create a hazard event (boil-over, disturbance or cleared).

    Args:
        event_type: One of the hazard event types.
        vibration: Vibration signal at detection time.
        center_temp: Center sensor temperature in Celsius.

    Returns:
        Hazard event.
    """
    return Event(
        type=event_type,
        data={"vibration": vibration, "center_temp": center_temp},
        source="detector",
    )
