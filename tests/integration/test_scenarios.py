"""End-to-end cooking scenarios driven tick by tick."""

import random
from datetime import datetime, timedelta

import pytest

from cooktop.config import CooktopConfig
from cooktop.core.fsm import CookingStateMachine
from cooktop.core.session import SessionSnapshot
from cooktop.core.states import HAZARD_STATES, TIMED_STATES, CookingState, CookingType

NOW = datetime(2026, 10, 19, 12, 0, 0)


def _check_invariants(snapshot: SessionSnapshot) -> None:
    assert 0 <= snapshot.power <= 10
    assert all(22.0 <= t <= 260.0 for t in snapshot.sensor_array)
    assert snapshot.remaining_time >= 0.0
    assert len(snapshot.history) <= 60
    if snapshot.state in (CookingState.IDLE, CookingState.RESERVED, CookingState.COMPLETE):
        assert snapshot.power == 0
    if snapshot.state in HAZARD_STATES:
        assert snapshot.power == 1


class TestRamenScenario:
    """Full ramen cycle: heat, wait, cook with boil-over watch, complete."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_full_cycle(self, test_config: CooktopConfig, seed: int) -> None:
        machine = CookingStateMachine(test_config, rng=random.Random(seed))
        machine.start(test_config.get_recipe("ramen"))
        visited: list[CookingState] = []

        for _ in range(1000):
            snapshot = machine.tick()
            _check_invariants(snapshot)
            # No hazard can be flagged before the ingredients are in
            assert snapshot.state not in HAZARD_STATES
            if snapshot.state == CookingState.WAITING_FOR_INGREDIENTS:
                break
        else:
            pytest.fail("never reached WAITING_FOR_INGREDIENTS")

        assert machine.confirm_ingredients_added()
        remaining = machine.session.remaining_time
        for _ in range(3000):
            snapshot = machine.tick()
            _check_invariants(snapshot)
            visited.append(snapshot.state)
            if snapshot.state in TIMED_STATES or snapshot.state == CookingState.COMPLETE:
                assert snapshot.remaining_time <= remaining
                remaining = snapshot.remaining_time
            if snapshot.state == CookingState.COMPLETE:
                break
        else:
            pytest.fail("never completed")

        # 240s at 200ms
        assert sum(1 for s in visited if s in TIMED_STATES) >= 1199
        assert snapshot.remaining_time == 0.0
        assert machine.acknowledge_complete()
        assert machine.state == CookingState.IDLE

    def test_same_seed_same_run(self, test_config: CooktopConfig) -> None:
        """A seeded run is reproducible tick for tick."""
        runs = []
        for _ in range(2):
            machine = CookingStateMachine(test_config, rng=random.Random(11))
            machine.start(test_config.get_recipe("ramen"))
            runs.append([machine.tick().to_dict() for _ in range(300)])
        assert runs[0] == runs[1]


class TestPanScenario:
    """Enveloping-heat recipes."""

    def test_pancake_never_predicts_boil_over(self, test_config: CooktopConfig) -> None:
        machine = CookingStateMachine(test_config, rng=random.Random(5))
        machine.start(test_config.get_recipe("pancake"))
        states = set()
        for _ in range(1500):
            snapshot = machine.tick()
            _check_invariants(snapshot)
            states.add(snapshot.state)
        assert CookingState.COOKING_ACTIVE in states
        assert CookingState.WAITING_FOR_INGREDIENTS not in states
        assert CookingState.PREDICTING_BOILOVER not in states

    def test_pan_holds_near_target(self, test_config: CooktopConfig) -> None:
        """Anti-overshoot banding keeps the pan within a few degrees."""
        machine = CookingStateMachine(test_config, rng=random.Random(6))
        machine.start(test_config.get_recipe("pancake"))
        for _ in range(1500):
            snapshot = machine.tick()
        assert snapshot.state == CookingState.COOKING_ACTIVE
        assert 177.0 <= snapshot.center_temp <= 181.5


class TestAutoScenario:
    """Auto-detect recipe."""

    def test_auto_boils_and_completes(self, test_config: CooktopConfig) -> None:
        machine = CookingStateMachine(test_config, rng=random.Random(9))
        machine.start(test_config.get_recipe("auto"))
        for _ in range(1000):
            snapshot = machine.tick()
            if snapshot.state == CookingState.COMPLETE:
                break
        assert snapshot.state == CookingState.COMPLETE
        assert snapshot.cooking_type == CookingType.BOILING
        assert snapshot.vessel_info.is_known


class TestReservationScenario:
    """Reserved boil: idle until the computed start, then heat."""

    def test_reserved_boil(self, test_config: CooktopConfig) -> None:
        machine = CookingStateMachine(test_config, rng=random.Random(4), wall_clock=lambda: NOW)
        target = NOW + timedelta(minutes=30)
        assert machine.arm_reservation(target, test_config.get_recipe("boil_water"))
        start = machine.session.reservation_start_time
        assert start == target - timedelta(seconds=180)

        now = NOW
        while now < start:
            snapshot = machine.tick(now)
            assert snapshot.state == CookingState.RESERVED
            assert snapshot.power == 0
            now += timedelta(seconds=30)

        snapshot = machine.tick(now)
        assert snapshot.state == CookingState.HEATING_WATER
        for _ in range(1000):
            snapshot = machine.tick(now)
            if snapshot.state == CookingState.COMPLETE:
                break
        assert snapshot.state == CookingState.COMPLETE


class TestStopScenario:
    """Stop in the middle of a cycle."""

    def test_stop_mid_cycle(self, test_config: CooktopConfig) -> None:
        machine = CookingStateMachine(test_config, rng=random.Random(12))
        machine.start(test_config.get_recipe("ramen"))
        seen = set()
        for _ in range(400):
            snapshot = machine.tick()
            seen.add(snapshot.state)
            if snapshot.state == CookingState.WAITING_FOR_INGREDIENTS:
                break
        assert machine.stop()
        assert machine.snapshot.state == CookingState.IDLE
        assert machine.snapshot.power == 0
        # Stop again is harmless
        assert machine.stop()
        assert CookingState.HEATING_WATER in seen
