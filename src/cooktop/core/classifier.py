"""Cooking type and vessel inference from the heating trajectory.

This is a heuristic, not sensor fusion: the rate of rise of the center
sensor buckets the cooking process, and the peripheral sensors' rise
relative to the center hints at vessel size and placement. ``UNKNOWN``
is an accepted outcome.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from statistics import fmean, pstdev
from typing import Optional

from ..config import ClassifierConfig
from .session import SensorHistory, VesselInfo
from .states import CookingType, VesselAlignment, VesselMaterial, VesselSize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Classification:
    """Inference result for one evaluation."""

    cooking_type: CookingType
    vessel_info: VesselInfo
    rate_of_rise: float


class VesselClassifier:
    """Infers cooking type and vessel attributes for auto-detect recipes."""

    def __init__(self, config: Optional[ClassifierConfig] = None) -> None:
        self.config = config or ClassifierConfig()

    def rate_of_rise(self, history: SensorHistory) -> Optional[float]:
        """Center temperature rise per tick across the history window.

        Returns:
            Degrees per tick, or None while history is too short.
        """
        if len(history) <= self.config.min_history_ticks:
            return None
        first, last = history.first(), history.last()
        elapsed = last.tick - first.tick
        if elapsed <= 0:
            return None
        return (last.center_temp - first.center_temp) / elapsed

    def cooking_type_for(self, rate: float) -> CookingType:
        cfg = self.config
        if rate >= cfg.frying_rate:
            return CookingType.FRYING
        if rate >= cfg.pan_searing_rate:
            return CookingType.PAN_SEARING
        if rate >= cfg.boiling_rate:
            return CookingType.BOILING
        if rate >= cfg.simmering_rate:
            return CookingType.SIMMERING
        return CookingType.UNKNOWN

    def material_for(self, rate: float) -> VesselMaterial:
        # Thin conductive pans heat fastest, heavy cast iron slowest
        if rate >= self.config.aluminum_rate:
            return VesselMaterial.ALUMINUM
        if rate >= self.config.stainless_rate:
            return VesselMaterial.STAINLESS
        return VesselMaterial.CAST_IRON

    def vessel_for(self, history: SensorHistory, rate: float) -> VesselInfo:
        """Infer vessel attributes from the peripheral rise pattern."""
        first, last = history.first(), history.last()
        center_rise = last.center_temp - first.center_temp
        rises = [
            after - before
            for before, after in zip(first.sensor_array[1:], last.sensor_array[1:])
        ]
        mean_rise = fmean(rises)

        ratio = mean_rise / center_rise if center_rise > 0 else 0.0
        if ratio >= self.config.large_ratio:
            size = VesselSize.LARGE
        elif ratio >= self.config.medium_ratio:
            size = VesselSize.MEDIUM
        else:
            size = VesselSize.SMALL

        spread = pstdev(rises) / mean_rise if mean_rise > 0 else 0.0
        if spread >= self.config.eccentric_spread:
            alignment = VesselAlignment.ECCENTRIC
        else:
            alignment = VesselAlignment.CENTERED

        return VesselInfo(
            material=self.material_for(rate),
            size=size,
            alignment=alignment,
        )

    def classify(self, history: SensorHistory) -> Optional[Classification]:
        """Evaluate the history window.

        Returns:
            A classification once the cooking type resolves, else None.
        """
        rate = self.rate_of_rise(history)
        if rate is None:
            return None

        cooking_type = self.cooking_type_for(rate)
        if cooking_type == CookingType.UNKNOWN:
            return None

        vessel = self.vessel_for(history, rate)
        logger.info(
            "Classified %s (%.2fC/tick), vessel %s/%s/%s",
            cooking_type.name,
            rate,
            vessel.material.value,
            vessel.size.value,
            vessel.alignment.value,
        )
        return Classification(cooking_type=cooking_type, vessel_info=vessel, rate_of_rise=rate)

    def target_for(self, cooking_type: CookingType) -> Optional[float]:
        """Target temperature to adopt for a detected cooking type."""
        return self.config.type_targets.get(cooking_type.name)
