"""Boil-over and disturbance detection."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from ..config import DetectorConfig
from ..recipes import Recipe
from .states import CookingState


@dataclass(frozen=True)
class HazardAssessment:
    """Detector verdict for one tick.

    Attributes:
        boil_over: Froth signal crossed the boil-over threshold.
        disturbance: Random or temperature-jump disturbance fired.
        boil_over_cleared: Vibration settled below the recovery threshold.
    """

    boil_over: bool = False
    disturbance: bool = False
    boil_over_cleared: bool = False


class HazardDetector:
    """Evaluates the instantaneous vibration and temperature signals.

    Thresholds come from configuration; they are tuned constants rather
    than a validated physical model.
    """

    def __init__(self, config: Optional[DetectorConfig] = None) -> None:
        self.config = config or DetectorConfig()

    def is_boil_over(self, vibration: float, recipe: Recipe) -> bool:
        """Boil-over risk applies to direct-heat recipes only."""
        if recipe.requires_enveloping_heat:
            return False
        return vibration > self.config.boil_over_threshold

    def is_cleared(self, vibration: float) -> bool:
        return vibration < self.config.boil_over_recovery

    def is_disturbance(self, center_delta: float, rng: random.Random) -> bool:
        """Sudden temperature jump (lid lift, vessel moved) or random trigger."""
        if abs(center_delta) >= self.config.disturbance_temp_jump:
            return True
        return rng.random() < self.config.disturbance_probability

    def assess(
        self,
        state: CookingState,
        recipe: Recipe,
        vibration: float,
        center_delta: float,
        rng: random.Random,
    ) -> HazardAssessment:
        """Evaluate hazards relevant to the current state.

        Args:
            state: Current cooking state.
            recipe: Active recipe.
            vibration: Vibration signal this tick.
            center_delta: Center temperature change since the last tick.
            rng: Random source for the disturbance trigger.

        Returns:
            Hazard assessment; all flags False outside cooking states.
        """
        if state == CookingState.COOKING_ACTIVE:
            boil_over = self.is_boil_over(vibration, recipe)
            # Only draw from rng when needed so seeded runs stay aligned
            disturbance = not boil_over and self.is_disturbance(center_delta, rng)
            return HazardAssessment(boil_over=boil_over, disturbance=disturbance)
        if state == CookingState.PREDICTING_BOILOVER:
            return HazardAssessment(boil_over_cleared=self.is_cleared(vibration))
        return HazardAssessment()
