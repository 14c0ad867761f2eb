"""Cooking state machine: the single owner of the cooking session."""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable, Optional

from ..config import CooktopConfig
from ..recipes import Recipe
from ..simulator.process_model import HeatCommand, ProcessModel, ProcessParameters, ThermalState
from .classifier import VesselClassifier
from .control import ControlPolicy
from .detector import HazardAssessment, HazardDetector
from .events import (
    Event,
    EventType,
    command_rejected_event,
    hazard_event,
    state_enter_event,
    state_exit_event,
)
from .safety import SafetyAutoOff
from .scheduler import ReservationScheduler, TargetTime
from .session import CookingSession, SensorHistory, SensorHistoryEntry, SessionSnapshot
from .states import TIMED_STATES, CookingState, CookingType, can_transition

logger = logging.getLogger(__name__)

WallClock = Callable[[], datetime]

# States where the classifier may run
_CLASSIFY_STATES = frozenset({
    CookingState.HEATING_WATER,
    CookingState.WAITING_FOR_INGREDIENTS,
    CookingState.COOKING_ACTIVE,
})


def process_parameters(config: CooktopConfig) -> ProcessParameters:
    """Derive process model parameters from configuration."""
    sim = config.simulation
    return ProcessParameters(
        ambient_temp_c=sim.ambient_temp_c,
        max_temp_c=sim.max_temp_c,
        max_power=config.control.max_power,
        thermal_mass=sim.thermal_mass,
        peripheral_coupling=tuple(sim.peripheral_coupling),
        overshoot_margin=config.control.overshoot_margin,
    )


class CookingStateMachine:
    """Orchestrates one control tick and applies the transition table.

    Each tick runs, in order: reservation gate (RESERVED only), process
    model step, vessel classification, power selection, hazard detection,
    state transitions, safety auto-off, snapshot. Commands mutate the same
    session between ticks; invalid commands are ignored and return False.

    The machine never blocks and performs no I/O. Events produced during a
    tick or command are queued and handed out by :meth:`drain_events`.

    Example:
        machine = CookingStateMachine(config, rng=random.Random(7))
        machine.start(config.get_recipe("ramen"))
        snapshot = machine.tick()
    """

    def __init__(
        self,
        config: Optional[CooktopConfig] = None,
        process: Optional[ProcessModel] = None,
        rng: Optional[random.Random] = None,
        wall_clock: WallClock = datetime.now,
    ) -> None:
        """Initialize the state machine in IDLE.

        Args:
            config: Configuration. Defaults if None.
            process: Process model (measurement feed). Built from config if None.
            rng: Random source for a newly built process model. Seeded from
                config.simulation.seed if None.
            wall_clock: Callable returning the current wall-clock time.
        """
        self.config = config or CooktopConfig()
        if process is None:
            if rng is None:
                rng = random.Random(self.config.simulation.seed)
            process = ProcessModel(process_parameters(self.config), rng)
        self._process = process
        self._wall_clock = wall_clock

        self._policy = ControlPolicy(self.config.control)
        self._detector = HazardDetector(self.config.detector)
        self._classifier = VesselClassifier(self.config.classifier)
        self._scheduler = ReservationScheduler(self.config.reservation)
        self._safety = SafetyAutoOff(self.config.auto_off_ticks)

        self._session = CookingSession()
        self._history = SensorHistory(self.config.history_capacity)
        self._previous_state: Optional[CookingState] = None
        self._tick = 0
        self._events: list[Event] = []
        self._snapshot = self._build_snapshot(self._process.state)

    @property
    def state(self) -> CookingState:
        """Current cooking state."""
        return self._session.state

    @property
    def previous_state(self) -> Optional[CookingState]:
        """Previous state, or None before the first transition."""
        return self._previous_state

    @property
    def session(self) -> CookingSession:
        """The live session. Callers must treat it as read-only."""
        return self._session

    @property
    def process(self) -> ProcessModel:
        return self._process

    @property
    def history(self) -> SensorHistory:
        return self._history

    @property
    def snapshot(self) -> SessionSnapshot:
        """Snapshot published by the last tick or command."""
        return self._snapshot

    @property
    def tick_count(self) -> int:
        return self._tick

    def drain_events(self) -> list[Event]:
        """Return and clear events queued since the last call."""
        events, self._events = self._events, []
        return events

    def transition_to(self, new_state: CookingState) -> bool:
        """Attempt to transition to a new state.

        Validates against the transition table and queues exit/enter events.

        Args:
            new_state: Target state.

        Returns:
            True if transition succeeded, False if invalid.
        """
        current = self._session.state
        if not can_transition(current, new_state):
            logger.warning("Invalid transition: %s -> %s", current.name, new_state.name)
            return False

        self._events.append(state_exit_event(current.name))
        self._previous_state = current
        self._session.state = new_state
        self._events.append(state_enter_event(new_state.name, current.name))
        logger.info("State transition: %s -> %s", current.name, new_state.name)
        return True

    # Commands

    def _reject(self, command: str) -> bool:
        logger.debug("Ignoring %s in state %s", command, self._session.state.name)
        self._events.append(command_rejected_event(command, self._session.state.name))
        return False

    def select_recipe(self, recipe: Recipe) -> bool:
        """Choose the recipe for the next start. IDLE only."""
        if self._session.state != CookingState.IDLE:
            return self._reject("select_recipe")
        self._session.selected_recipe = recipe
        logger.info("Recipe selected: %s", recipe.id)
        self._refresh_snapshot()
        return True

    def start(self, recipe: Optional[Recipe] = None) -> bool:
        """Begin heating with ``recipe`` or the selected recipe. IDLE only."""
        recipe = recipe or self._session.selected_recipe
        if self._session.state != CookingState.IDLE or recipe is None:
            return self._reject("start")

        self._session.begin(recipe)
        self._history.clear()
        self.transition_to(CookingState.HEATING_WATER)
        self._session.power = self._policy.initial_power(recipe)
        logger.info("Cooking started: %s (target %.1fC)", recipe.id, recipe.target_temperature)
        self._refresh_snapshot()
        return True

    def arm_reservation(
        self,
        target_time: TargetTime,
        recipe: Optional[Recipe] = None,
    ) -> bool:
        """Reserve a recipe to finish at ``target_time``. IDLE only.

        Args:
            target_time: Completion time, datetime or time of day.
            recipe: Recipe to reserve; the selected recipe if None. Must be
                reservable.
        """
        recipe = recipe or self._session.selected_recipe
        if (
            self._session.state != CookingState.IDLE
            or recipe is None
            or not recipe.reservable
        ):
            return self._reject("arm_reservation")

        start_time = self._scheduler.compute_start_time(
            target_time, recipe.cook_duration, self._wall_clock()
        )
        self._session.begin(recipe)
        self._session.reservation_start_time = start_time
        self.transition_to(CookingState.RESERVED)
        self._events.append(Event(
            type=EventType.RESERVATION_ARMED,
            data={"recipe": recipe.id, "start_time": start_time.isoformat()},
            source="scheduler",
        ))
        logger.info("Reservation armed: %s starts at %s", recipe.id, start_time.isoformat())
        self._refresh_snapshot()
        return True

    def confirm_ingredients_added(self) -> bool:
        """Operator put the ingredients in. WAITING_FOR_INGREDIENTS only."""
        session = self._session
        if session.state != CookingState.WAITING_FOR_INGREDIENTS:
            return self._reject("confirm_ingredients_added")

        session.ingredients_added = True
        self._process.apply_ingredient_load(self.config.simulation.ingredient_temp_drop)
        self.transition_to(CookingState.COOKING_ACTIVE)
        session.power = self._policy.select_power(
            CookingState.COOKING_ACTIVE,
            session.selected_recipe,
            self._process.state.center,
            session.target_temperature,
        )
        self._refresh_snapshot()
        return True

    def acknowledge_complete(self) -> bool:
        """Operator acknowledged completion. COMPLETE only."""
        if self._session.state != CookingState.COMPLETE:
            return self._reject("acknowledge_complete")
        self._safety.acknowledge(self._session)
        self._reset_session()
        return True

    def stop(self) -> bool:
        """Cancel immediately from any state. Always accepted."""
        if self._session.state != CookingState.IDLE:
            logger.info("Stop requested in %s", self._session.state.name)
        self._reset_session()
        return True

    def _reset_session(self) -> None:
        if self._session.state != CookingState.IDLE:
            self.transition_to(CookingState.IDLE)
        self._session.reset()
        self._refresh_snapshot()

    # Tick

    def tick(self, now: Optional[datetime] = None) -> SessionSnapshot:
        """Advance the control loop by one fixed period.

        Args:
            now: Wall-clock time for the reservation gate. Uses the
                injected wall clock if None.

        Returns:
            Snapshot of the session after this tick.
        """
        self._tick += 1
        session = self._session

        if session.state == CookingState.RESERVED:
            if now is None:
                now = self._wall_clock()
            if self._scheduler.is_due(session.reservation_start_time, now):
                self._history.clear()
                self.transition_to(CookingState.HEATING_WATER)
                session.power = self._policy.initial_power(session.selected_recipe)
            self._snapshot = self._build_snapshot(self._process.state)
            return self._snapshot

        recipe = session.selected_recipe
        previous_center = self._process.state.center
        froth = self.config.detector.starch_froth_factor if session.ingredients_added else 1.0
        thermal = self._process.step(HeatCommand(
            power=session.power,
            target_temp=session.target_temperature,
            enveloping=bool(recipe and recipe.requires_enveloping_heat),
            froth_factor=froth,
        ))
        self._history.append(SensorHistoryEntry(
            tick=self._tick,
            center_temp=thermal.center,
            legacy_temp=thermal.legacy_temp,
            vibration=thermal.vibration,
            power=session.power,
            heat_uniformity=thermal.heat_uniformity,
            sensor_array=thermal.sensors,
            sound_frequency=thermal.sound_frequency,
        ))

        if recipe is not None and session.state not in (CookingState.IDLE, CookingState.COMPLETE):
            self._classify(recipe)
            power = self._policy.select_power(
                session.state, recipe, thermal.center, session.target_temperature
            )
            hazards = self._detector.assess(
                session.state,
                recipe,
                thermal.vibration,
                thermal.center - previous_center,
                self._process.rng,
            )
            self._apply_transitions(recipe, thermal, power, hazards)
        else:
            session.power = 0

        if self._safety.update(session):
            self._events.append(Event(
                type=EventType.AUTO_OFF,
                data={"ticks": session.auto_off_counter},
                source="safety",
            ))
            self._reset_session()

        self._snapshot = self._build_snapshot(thermal)
        return self._snapshot

    def _classify(self, recipe: Recipe) -> None:
        session = self._session
        if (
            not recipe.auto_detect
            or session.cooking_type != CookingType.UNKNOWN
            or session.state not in _CLASSIFY_STATES
        ):
            return
        result = self._classifier.classify(self._history)
        if result is None:
            return

        session.cooking_type = result.cooking_type
        if not session.vessel_info.is_known:
            session.vessel_info = result.vessel_info
        target = self._classifier.target_for(result.cooking_type)
        if target is not None:
            session.target_temperature = target
        self._events.append(Event(
            type=EventType.COOKING_TYPE_DETECTED,
            data={
                "cooking_type": result.cooking_type.name,
                "vessel": result.vessel_info.to_dict(),
                "rate_of_rise": result.rate_of_rise,
                "target_temperature": session.target_temperature,
            },
            source="classifier",
        ))

    def _complete(self) -> None:
        self.transition_to(CookingState.COMPLETE)
        self._session.power = 0
        self._events.append(Event(
            type=EventType.COOKING_COMPLETE,
            data={"recipe": self._session.selected_recipe.id},
            source="fsm",
        ))

    def _resume_cooking(self, thermal: ThermalState) -> None:
        session = self._session
        self.transition_to(CookingState.COOKING_ACTIVE)
        session.power = self._policy.select_power(
            CookingState.COOKING_ACTIVE,
            session.selected_recipe,
            thermal.center,
            session.target_temperature,
        )
        self._events.append(hazard_event(EventType.HAZARD_CLEARED, thermal.vibration, thermal.center))

    def _apply_transitions(
        self,
        recipe: Recipe,
        thermal: ThermalState,
        power: int,
        hazards: HazardAssessment,
    ) -> None:
        """Apply the tick-driven rows of the transition table."""
        session = self._session
        state = session.state
        minimum = self.config.control.minimum_power

        if state == CookingState.HEATING_WATER:
            session.power = power
            if not self._policy.target_reached(thermal.center, session.target_temperature):
                return
            if recipe.is_instantaneous:
                self._complete()
            elif recipe.auto_starts_cooking:
                self.transition_to(CookingState.COOKING_ACTIVE)
                session.power = self._policy.select_power(
                    CookingState.COOKING_ACTIVE, recipe, thermal.center, session.target_temperature
                )
            else:
                self.transition_to(CookingState.WAITING_FOR_INGREDIENTS)
                session.power = self.config.control.keep_warm_power
            return

        if state == CookingState.WAITING_FOR_INGREDIENTS:
            session.power = power
            return

        if state not in TIMED_STATES:
            return

        # Hazard states still consume cook time
        session.remaining_time = max(
            0.0, round(session.remaining_time - self.config.tick_interval, 6)
        )

        if state == CookingState.COOKING_ACTIVE:
            if hazards.boil_over:
                self.transition_to(CookingState.PREDICTING_BOILOVER)
                session.power = minimum
                self._events.append(hazard_event(
                    EventType.BOILOVER_PREDICTED, thermal.vibration, thermal.center
                ))
            elif session.remaining_time <= 0:
                self._complete()
            elif hazards.disturbance:
                self.transition_to(CookingState.DISTURBANCE_DETECTED)
                session.power = minimum
                session.recovery_ticks = self.config.detector.disturbance_recovery_ticks
                self._events.append(hazard_event(
                    EventType.DISTURBANCE_DETECTED, thermal.vibration, thermal.center
                ))
            else:
                session.power = power

        elif state == CookingState.PREDICTING_BOILOVER:
            if hazards.boil_over_cleared:
                self._resume_cooking(thermal)
            else:
                session.power = minimum

        elif state == CookingState.DISTURBANCE_DETECTED:
            session.recovery_ticks = max(0, session.recovery_ticks - 1)
            if session.recovery_ticks == 0:
                self._resume_cooking(thermal)
            else:
                session.power = minimum

    # Snapshot

    def _refresh_snapshot(self) -> None:
        self._snapshot = self._build_snapshot(self._process.state)

    def _build_snapshot(self, thermal: ThermalState) -> SessionSnapshot:
        session = self._session
        recipe = session.selected_recipe
        return SessionSnapshot(
            tick=self._tick,
            state=session.state,
            power=session.power,
            remaining_time=session.remaining_time,
            center_temp=thermal.center,
            legacy_temp=thermal.legacy_temp,
            sensor_array=thermal.sensors,
            vibration=thermal.vibration,
            heat_uniformity=thermal.heat_uniformity,
            cooking_type=session.cooking_type,
            vessel_info=session.vessel_info,
            target_temperature=session.target_temperature,
            recipe_id=recipe.id if recipe else None,
            reservation_start_time=session.reservation_start_time,
            auto_off_counter=session.auto_off_counter,
            ingredients_added=session.ingredients_added,
            history=self._history.snapshot(),
            sound_frequency=thermal.sound_frequency,
        )
