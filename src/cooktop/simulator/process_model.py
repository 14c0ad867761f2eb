"""Thermal process model for the induction cooking zone.

Models the nine-sensor temperature field above the coil, a slow legacy
sensor and the surface vibration signal, one fixed tick at a time. The
model knows nothing about recipes or cooking states; it only sees the
commanded power and heat-delivery style.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Optional

logger = logging.getLogger(__name__)

SENSOR_COUNT: int = 9  # index 0 center, 1..8 peripheral ring
SOUND_BASE_HZ: float = 100.0  # Acoustic pitch of the vessel at 0C


@dataclass
class ProcessParameters:
    """Configurable process model parameters.

    Temperatures are in Celsius, rates in degrees per tick.
    Defaults reproduce the reference heating curve for a 100C target
    at the 200ms tick.
    """

    # Limits
    ambient_temp_c: float = 22.0
    max_temp_c: float = 260.0
    max_power: int = 10

    # Heat gain: power / gain_divisor * (headroom - T / (target * saturation_ratio))
    gain_divisor: float = 15.0
    headroom: float = 1.1
    saturation_ratio: float = 1.3
    # Vessel + contents thermal mass (1.0 = 550ml water in a medium pot)
    thermal_mass: float = 1.0

    # Peripheral sensors receive a fraction of the center gain
    peripheral_fraction_min: float = 0.7
    peripheral_fraction_max: float = 0.9
    peripheral_noise: float = 0.1
    # Per-sensor coupling to the coil; uneven values model an off-center vessel
    peripheral_coupling: tuple[float, ...] = field(
        default_factory=lambda: (1.0,) * (SENSOR_COUNT - 1)
    )
    # Enveloping delivery pulls peripheral sensors toward the center
    enveloping_spread: float = 0.05

    # Natural cooling with the coil off
    cooling_rate: float = 0.15

    # Anti-overshoot nudge above target + overshoot_margin
    overshoot_margin: float = 1.0
    overshoot_nudge: float = 0.1

    # Legacy (indirect) sensor: first-order lag toward center
    legacy_lag: float = 0.04
    legacy_noise: float = 0.5

    # Vibration / froth
    boiling_point_c: float = 100.0
    froth_onset_margin: float = 4.0
    froth_gain: float = 5.0
    vibration_base: float = 5.0
    vibration_noise: float = 5.0
    vibration_decay: float = 5.0

    # Heat uniformity = 100 - k * (center - mean(peripheral))
    uniformity_gain: float = 2.0


@dataclass(frozen=True)
class ThermalState:
    """Immutable thermal state after a tick.

    Attributes:
        sensors: Nine temperatures; index 0 is the ground-truth center.
        legacy_temp: Lagging external-facing sensor.
        vibration: Surface vibration / froth signal.
        heat_uniformity: 0..100 score, 100 = perfectly even.
        tick: Number of steps taken since reset.
    """

    sensors: tuple[float, ...]
    legacy_temp: float
    vibration: float
    heat_uniformity: float = 100.0
    tick: int = 0

    @property
    def center(self) -> float:
        return self.sensors[0]

    @property
    def peripheral(self) -> tuple[float, ...]:
        return self.sensors[1:]

    @property
    def sound_frequency(self) -> float:
        """Diagnostic pitch in Hz; rises one-for-one with the center."""
        return SOUND_BASE_HZ + self.center

    @classmethod
    def at_temperature(cls, temp_c: float, vibration: float = 0.0) -> "ThermalState":
        """Uniform state with every sensor at ``temp_c``."""
        return cls(
            sensors=(temp_c,) * SENSOR_COUNT,
            legacy_temp=temp_c,
            vibration=vibration,
        )


@dataclass(frozen=True)
class HeatCommand:
    """Actuator command for one tick.

    Attributes:
        power: Coil power level 0..max_power.
        target_temp: Current target, used for saturation and overshoot.
        enveloping: Spread heat to the peripheral zone.
        froth_factor: Froth multiplier (starch from added ingredients).
    """

    power: int
    target_temp: Optional[float] = None
    enveloping: bool = False
    froth_factor: float = 1.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def heat_uniformity(sensors: tuple[float, ...], gain: float = 2.0) -> float:
    """Uniformity score of a sensor array, clamped to [0, 100]."""
    peripheral = sensors[1:]
    mean_peripheral = sum(peripheral) / len(peripheral)
    return _clamp(100.0 - gain * (sensors[0] - mean_peripheral), 0.0, 100.0)


def advance(
    state: ThermalState,
    command: HeatCommand,
    params: ProcessParameters,
    rng: random.Random,
) -> ThermalState:
    """Compute the thermal state one tick later.

    Args:
        state: Current thermal state.
        command: Power and delivery style applied during this tick.
        params: Model parameters.
        rng: Seedable noise source.

    Returns:
        New thermal state with every sensor clamped to
        [ambient_temp_c, max_temp_c].
    """
    floor, ceiling = params.ambient_temp_c, params.max_temp_c
    power = int(_clamp(command.power, 0, params.max_power))
    target = command.target_temp if command.target_temp else params.boiling_point_c
    center = state.center

    if power > 0:
        # Heat gain shrinks as the center approaches the target (saturation)
        saturation = params.headroom - center / (target * params.saturation_ratio)
        gain = max(0.0, power / params.gain_divisor * saturation) / params.thermal_mass
        new_center = center + gain

        peripheral = []
        for temp, coupling in zip(state.peripheral, params.peripheral_coupling):
            fraction = rng.uniform(params.peripheral_fraction_min, params.peripheral_fraction_max)
            temp += gain * fraction * coupling
            temp += rng.uniform(-params.peripheral_noise, params.peripheral_noise)
            if command.enveloping:
                temp += (new_center - temp) * params.enveloping_spread
            peripheral.append(temp)
    else:
        new_center = center - params.cooling_rate
        peripheral = [temp - params.cooling_rate for temp in state.peripheral]

    if command.target_temp is not None and new_center >= command.target_temp + params.overshoot_margin:
        new_center -= params.overshoot_nudge

    sensors = tuple(_clamp(t, floor, ceiling) for t in [new_center, *peripheral])
    new_center = sensors[0]

    legacy = state.legacy_temp + (new_center - state.legacy_temp) * params.legacy_lag
    legacy += rng.uniform(-params.legacy_noise, params.legacy_noise)

    # Froth builds near the boiling point in proportion to delivered power,
    # saturating once the contents boil
    onset = params.boiling_point_c - params.froth_onset_margin
    froth = (
        max(0.0, min(new_center, params.boiling_point_c) - onset)
        * params.froth_gain
        * command.froth_factor
        * (power / params.max_power)
    )
    vibration = params.vibration_base + froth + rng.uniform(0.0, params.vibration_noise)
    if vibration < state.vibration:
        # Rises instantly, settles gradually
        vibration = max(vibration, state.vibration - params.vibration_decay)

    return ThermalState(
        sensors=sensors,
        legacy_temp=_clamp(legacy, floor, ceiling),
        vibration=vibration,
        heat_uniformity=heat_uniformity(sensors, params.uniformity_gain),
        tick=state.tick + 1,
    )


class ProcessModel:
    """Stateful wrapper around :func:`advance`.

    Holds the parameters, the injected random source and the current
    thermal state. All noise is drawn from ``rng`` so a seeded generator
    reproduces exact trajectories.

    Example:
        model = ProcessModel(rng=random.Random(42))
        state = model.step(HeatCommand(power=10, target_temp=100.0))
    """

    def __init__(
        self,
        params: Optional[ProcessParameters] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the process model at ambient temperature.

        Args:
            params: Model parameters. Uses defaults if None.
            rng: Random source. A fresh unseeded one if None.
        """
        self.params = params or ProcessParameters()
        if len(self.params.peripheral_coupling) != SENSOR_COUNT - 1:
            raise ValueError(
                f"peripheral_coupling needs {SENSOR_COUNT - 1} values, "
                f"got {len(self.params.peripheral_coupling)}"
            )
        self._rng = rng or random.Random()
        self.state = ThermalState.at_temperature(
            self.params.ambient_temp_c, self.params.vibration_base
        )

    @property
    def rng(self) -> random.Random:
        """Random source shared with the hazard detector."""
        return self._rng

    def step(self, command: HeatCommand) -> ThermalState:
        """Advance one tick under ``command`` and return the new state."""
        self.state = advance(self.state, command, self.params, self._rng)
        return self.state

    def apply_ingredient_load(self, temp_drop: float) -> None:
        """Cool the vessel when cold ingredients go in.

        Args:
            temp_drop: Center temperature drop in Celsius.
        """
        if temp_drop <= 0:
            return
        floor = self.params.ambient_temp_c
        sensors = (
            max(floor, self.state.center - temp_drop),
            *(max(floor, t - temp_drop / 2) for t in self.state.peripheral),
        )
        self.state = replace(
            self.state,
            sensors=sensors,
            heat_uniformity=heat_uniformity(sensors, self.params.uniformity_gain),
        )
        logger.debug("Ingredient load applied: -%.1fC at center", temp_drop)

    def inject_vibration(self, vibration: float) -> None:
        """Force the vibration signal, e.g. a froth surge in a demo."""
        self.state = replace(self.state, vibration=max(0.0, vibration))

    def reset(self, temp_c: Optional[float] = None) -> None:
        """Reset every sensor to ``temp_c`` (ambient by default).

        Args:
            temp_c: Starting temperature, clamped to the model limits.
        """
        if temp_c is None:
            temp_c = self.params.ambient_temp_c
        temp_c = _clamp(temp_c, self.params.ambient_temp_c, self.params.max_temp_c)
        self.state = ThermalState.at_temperature(temp_c, self.params.vibration_base)
