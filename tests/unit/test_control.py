"""Tests for power selection."""

import pytest

from cooktop.config import ControlConfig
from cooktop.core.control import ControlPolicy
from cooktop.core.states import CookingState
from cooktop.recipes import Recipe


@pytest.fixture
def policy() -> ControlPolicy:
    return ControlPolicy(ControlConfig())


class TestInitialPower:
    """Test preheat power levels."""

    def test_direct_recipe_preheats_at_full(self, policy: ControlPolicy, ramen: Recipe) -> None:
        """Direct-heat recipes preheat at the initial level."""
        assert policy.initial_power(ramen) == 10

    def test_enveloping_recipe_preheats_gently(self, policy: ControlPolicy, pancake: Recipe) -> None:
        """Enveloping recipes preheat at the enveloping level."""
        assert policy.initial_power(pancake) == 6


class TestSelectPower:
    """Test per-state power selection."""

    @pytest.mark.parametrize(
        "state",
        [CookingState.IDLE, CookingState.RESERVED, CookingState.COMPLETE],
    )
    def test_zero_when_not_heating(self, policy: ControlPolicy, ramen: Recipe, state: CookingState) -> None:
        """No power in idle, reserved or complete."""
        assert policy.select_power(state, ramen, 50.0, 100.0) == 0

    def test_zero_without_recipe(self, policy: ControlPolicy) -> None:
        assert policy.select_power(CookingState.COOKING_ACTIVE, None, 50.0, 100.0) == 0

    @pytest.mark.parametrize(
        "state",
        [CookingState.PREDICTING_BOILOVER, CookingState.DISTURBANCE_DETECTED],
    )
    def test_minimum_in_hazard_states(self, policy: ControlPolicy, ramen: Recipe, state: CookingState) -> None:
        """Hazard states throttle to the minimum level."""
        assert policy.select_power(state, ramen, 99.0, 100.0) == 1

    def test_heating_below_band_uses_initial(self, policy: ControlPolicy, ramen: Recipe) -> None:
        """Far below target the preheat level applies."""
        assert policy.select_power(CookingState.HEATING_WATER, ramen, 40.0, 100.0) == 10

    def test_cooking_below_band_uses_direct(self, policy: ControlPolicy, ramen: Recipe) -> None:
        """Far below target while cooking the nominal direct level applies."""
        assert policy.select_power(CookingState.COOKING_ACTIVE, ramen, 90.0, 100.0) == 8

    def test_cooking_enveloping_level(self, policy: ControlPolicy, fish_fry: Recipe) -> None:
        assert policy.select_power(CookingState.COOKING_ACTIVE, fish_fry, 150.0, 180.0) == 6

    def test_band_reduces_power(self, policy: ControlPolicy, ramen: Recipe) -> None:
        """Inside the band power drops to maintenance plus correction."""
        assert policy.select_power(CookingState.HEATING_WATER, ramen, 98.0, 100.0) == 2
        assert policy.select_power(CookingState.HEATING_WATER, ramen, 99.6, 100.0) == 1

    def test_at_target_holds_maintenance(self, policy: ControlPolicy, ramen: Recipe) -> None:
        assert policy.select_power(CookingState.COOKING_ACTIVE, ramen, 100.5, 100.0) == 1

    def test_overshoot_cuts_power(self, policy: ControlPolicy, ramen: Recipe) -> None:
        """At target + margin the coil is switched off."""
        assert policy.select_power(CookingState.COOKING_ACTIVE, ramen, 101.0, 100.0) == 0

    def test_waiting_keeps_warm(self, policy: ControlPolicy, ramen: Recipe) -> None:
        """Waiting for ingredients holds the keep-warm level."""
        assert policy.select_power(CookingState.WAITING_FOR_INGREDIENTS, ramen, 99.6, 100.0) == 2

    def test_waiting_overshoot_cuts_power(self, policy: ControlPolicy, ramen: Recipe) -> None:
        assert policy.select_power(CookingState.WAITING_FOR_INGREDIENTS, ramen, 101.2, 100.0) == 0

    def test_power_within_scale(self, policy: ControlPolicy, ramen: Recipe) -> None:
        """Selected power is always on the 0..10 scale."""
        for state in CookingState:
            for temp in (22.0, 97.0, 99.0, 100.0, 102.0, 250.0):
                assert 0 <= policy.select_power(state, ramen, temp, 100.0) <= 10


class TestTargetReached:
    """Test target tolerance."""

    def test_within_tolerance(self, policy: ControlPolicy) -> None:
        assert policy.target_reached(99.5, 100.0)

    def test_below_tolerance(self, policy: ControlPolicy) -> None:
        assert not policy.target_reached(99.4, 100.0)
