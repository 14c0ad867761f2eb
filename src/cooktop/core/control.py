"""Power selection with anti-overshoot banding."""

from __future__ import annotations

from typing import Optional

from ..config import ControlConfig
from ..recipes import Recipe
from .states import HAZARD_STATES, CookingState


class ControlPolicy:
    """Selects a discrete coil power level each tick.

    Below the band the recipe's nominal level applies for the current
    phase. Within ``[target - band_below, target)`` power is held at the
    maintenance level plus a proportional correction. At or above
    ``target + overshoot_margin`` power is cut.
    """

    def __init__(self, config: Optional[ControlConfig] = None) -> None:
        self.config = config or ControlConfig()

    def initial_power(self, recipe: Recipe) -> int:
        """Preheat level applied on start or reservation activation."""
        if recipe.requires_enveloping_heat:
            return self.config.enveloping_power
        return self.config.initial_power

    def nominal_power(self, state: CookingState, recipe: Recipe) -> int:
        """Level used below the anti-overshoot band."""
        if state == CookingState.HEATING_WATER:
            return self.initial_power(recipe)
        if recipe.requires_enveloping_heat:
            return self.config.enveloping_power
        return self.config.direct_power

    def banded_power(self, nominal: int, center_temp: float, target_temp: float) -> int:
        """Apply the anti-overshoot band to a nominal level."""
        cfg = self.config
        if center_temp >= target_temp + cfg.overshoot_margin:
            return 0
        if center_temp >= target_temp:
            return min(nominal, cfg.maintenance_power)
        if center_temp >= target_temp - cfg.band_below:
            correction = cfg.proportional_gain * (target_temp - center_temp)
            return min(nominal, int(round(cfg.maintenance_power + correction)))
        return nominal

    def select_power(
        self,
        state: CookingState,
        recipe: Optional[Recipe],
        center_temp: float,
        target_temp: Optional[float],
    ) -> int:
        """Compute the power level for the next tick.

        Args:
            state: Current cooking state.
            recipe: Active recipe, or None when idle.
            center_temp: Ground-truth center temperature.
            target_temp: Effective target temperature.

        Returns:
            Power level in 0..max_power.
        """
        if recipe is None or target_temp is None:
            return 0
        if state in (CookingState.IDLE, CookingState.RESERVED, CookingState.COMPLETE):
            return 0
        if state in HAZARD_STATES:
            return self.config.minimum_power
        if state == CookingState.WAITING_FOR_INGREDIENTS:
            # Keep-warm is already a holding level; only the overshoot cut applies
            if center_temp >= target_temp + self.config.overshoot_margin:
                return 0
            return self.config.keep_warm_power

        power = self.banded_power(self.nominal_power(state, recipe), center_temp, target_temp)
        return max(0, min(self.config.max_power, power))

    def target_reached(self, center_temp: float, target_temp: float) -> bool:
        """True once the center is within tolerance of the target."""
        return center_temp >= target_temp - self.config.target_tolerance
