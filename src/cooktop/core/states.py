"""State definitions and transition rules for the cooking FSM."""

from __future__ import annotations

from enum import Enum, auto


class CookingState(Enum):
    """Cooking lifecycle states.

    A typical boiling recipe runs:
    IDLE -> HEATING_WATER -> WAITING_FOR_INGREDIENTS -> COOKING_ACTIVE -> COMPLETE -> IDLE
    Reserved recipes start from RESERVED instead of IDLE. While cooking,
    PREDICTING_BOILOVER and DISTURBANCE_DETECTED are transient hazard states
    that always return to COOKING_ACTIVE.

    COMPLETE resets itself to IDLE on acknowledgement or unattended timeout.
    """

    IDLE = auto()
    RESERVED = auto()
    HEATING_WATER = auto()
    WAITING_FOR_INGREDIENTS = auto()
    COOKING_ACTIVE = auto()
    PREDICTING_BOILOVER = auto()
    DISTURBANCE_DETECTED = auto()
    COMPLETE = auto()


class CookingType(Enum):
    """Cooking process inferred from the temperature-rise trajectory."""

    UNKNOWN = auto()
    BOILING = auto()
    FRYING = auto()
    PAN_SEARING = auto()
    SIMMERING = auto()


class VesselMaterial(Enum):
    STAINLESS = "Stainless"
    CAST_IRON = "CastIron"
    ALUMINUM = "Aluminum"
    UNKNOWN = "Unknown"


class VesselSize(Enum):
    SMALL = "Small"
    MEDIUM = "Medium"
    LARGE = "Large"


class VesselAlignment(Enum):
    CENTERED = "Centered"
    ECCENTRIC = "Eccentric"


# States in which the post-ingredient cook timer runs
TIMED_STATES: frozenset[CookingState] = frozenset({
    CookingState.COOKING_ACTIVE,
    CookingState.PREDICTING_BOILOVER,
    CookingState.DISTURBANCE_DETECTED,
})

HAZARD_STATES: frozenset[CookingState] = frozenset({
    CookingState.PREDICTING_BOILOVER,
    CookingState.DISTURBANCE_DETECTED,
})

# Allowed transitions per state. STOP (-> IDLE) is allowed from every state.
TRANSITIONS: dict[CookingState, frozenset[CookingState]] = {
    CookingState.IDLE: frozenset({
        CookingState.HEATING_WATER,  # start
        CookingState.RESERVED,  # armReservation
    }),
    CookingState.RESERVED: frozenset({
        CookingState.HEATING_WATER,  # start time reached
        CookingState.IDLE,  # stop
    }),
    CookingState.HEATING_WATER: frozenset({
        CookingState.WAITING_FOR_INGREDIENTS,
        CookingState.COOKING_ACTIVE,  # auto-start recipes
        CookingState.COMPLETE,  # instantaneous recipes
        CookingState.IDLE,
    }),
    CookingState.WAITING_FOR_INGREDIENTS: frozenset({
        CookingState.COOKING_ACTIVE,
        CookingState.IDLE,
    }),
    CookingState.COOKING_ACTIVE: frozenset({
        CookingState.PREDICTING_BOILOVER,
        CookingState.DISTURBANCE_DETECTED,
        CookingState.COMPLETE,
        CookingState.IDLE,
    }),
    CookingState.PREDICTING_BOILOVER: frozenset({
        CookingState.COOKING_ACTIVE,
        CookingState.IDLE,
    }),
    CookingState.DISTURBANCE_DETECTED: frozenset({
        CookingState.COOKING_ACTIVE,
        CookingState.IDLE,
    }),
    CookingState.COMPLETE: frozenset({
        CookingState.IDLE,  # acknowledge or safety auto-off
    }),
}


def can_transition(from_state: CookingState, to_state: CookingState) -> bool:
    """Check if a state transition is valid.

    Args:
        from_state: Current state.
        to_state: Desired target state.

    Returns:
        True if the transition is allowed, False otherwise.
    """
    return to_state in TRANSITIONS.get(from_state, frozenset())


def get_allowed_transitions(state: CookingState) -> frozenset[CookingState]:
    """Get the set of states that can be transitioned to from the given state."""
    return TRANSITIONS.get(state, frozenset())
