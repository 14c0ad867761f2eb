"""Pytest fixtures for cooktop tests."""

import random
from datetime import datetime
from typing import Callable, Optional

import pytest

from cooktop.config import CooktopConfig
from cooktop.core.clock import SimulationClock
from cooktop.core.fsm import CookingStateMachine
from cooktop.core.session import SessionSnapshot
from cooktop.core.states import CookingState
from cooktop.recipes import Recipe
from cooktop.simulator.process_model import ProcessModel, ProcessParameters

# Fixed wall clock for reservation tests
NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture
def test_config() -> CooktopConfig:
    """Default configuration with random disturbances disabled."""
    config = CooktopConfig()
    config.detector.disturbance_probability = 0.0
    config.simulation.seed = 1234
    return config


@pytest.fixture
def machine(test_config: CooktopConfig) -> CookingStateMachine:
    """Seeded state machine in IDLE with a fixed wall clock."""
    return CookingStateMachine(test_config, rng=random.Random(1234), wall_clock=lambda: NOW)


@pytest.fixture
def clock(machine: CookingStateMachine) -> SimulationClock:
    """Clock wrapping the seeded machine."""
    return SimulationClock(machine)


@pytest.fixture
def process_model() -> ProcessModel:
    """Process model with default parameters and a seeded rng."""
    return ProcessModel(ProcessParameters(), random.Random(99))


@pytest.fixture
def ramen(test_config: CooktopConfig) -> Recipe:
    return test_config.get_recipe("ramen")


@pytest.fixture
def boil_water(test_config: CooktopConfig) -> Recipe:
    return test_config.get_recipe("boil_water")


@pytest.fixture
def pancake(test_config: CooktopConfig) -> Recipe:
    return test_config.get_recipe("pancake")


@pytest.fixture
def fish_fry(test_config: CooktopConfig) -> Recipe:
    return test_config.get_recipe("fish_fry")


def run_until(
    machine: CookingStateMachine,
    predicate: Callable[[SessionSnapshot], bool],
    max_ticks: int = 3000,
    now: Optional[datetime] = None,
) -> SessionSnapshot:
    """Tick until ``predicate(snapshot)`` holds or fail after max_ticks."""
    for _ in range(max_ticks):
        snapshot = machine.tick(now)
        if predicate(snapshot):
            return snapshot
    raise AssertionError(f"Condition not met within {max_ticks} ticks, state={machine.state.name}")


def run_until_state(
    machine: CookingStateMachine,
    state: CookingState,
    max_ticks: int = 3000,
) -> SessionSnapshot:
    """Tick until the machine reaches ``state``."""
    return run_until(machine, lambda s: s.state == state, max_ticks)


@pytest.fixture
def tick_until() -> Callable[..., SessionSnapshot]:
    """Helper ticking a machine until a snapshot predicate holds."""
    return run_until


@pytest.fixture
def tick_until_state() -> Callable[..., SessionSnapshot]:
    """Helper ticking a machine until it reaches a state."""
    return run_until_state
