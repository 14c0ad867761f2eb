"""Recipe catalogue for the cooktop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Recipe:
    """Immutable recipe selected by the operator.

    The state machine only looks at the flags, never at ``id``.

    Attributes:
        id: Catalogue identifier.
        name: Display name.
        target_temperature: Target center temperature in Celsius.
        cook_duration: Post-ingredient cook time in seconds. Zero means the
            recipe completes as soon as the target is reached.
        requires_enveloping_heat: Spread power outward instead of direct
            center heating (pan frying). Disables boil-over throttling.
        auto_starts_cooking: Skip the wait for ingredients.
        reservable: May be armed for a deferred start.
        auto_detect: Infer cooking type and vessel from the rise trajectory.
        description: Free-form text for the dashboard.
    """

    id: str
    name: str
    target_temperature: float
    cook_duration: float
    requires_enveloping_heat: bool = False
    auto_starts_cooking: bool = False
    reservable: bool = False
    auto_detect: bool = False
    description: str = ""

    @property
    def is_instantaneous(self) -> bool:
        """True when reaching the target completes the recipe."""
        return self.cook_duration <= 0

    def to_dict(self) -> dict[str, Any]:
        """Convert recipe to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "target_temperature": self.target_temperature,
            "cook_duration": self.cook_duration,
            "requires_enveloping_heat": self.requires_enveloping_heat,
            "auto_starts_cooking": self.auto_starts_cooking,
            "reservable": self.reservable,
            "auto_detect": self.auto_detect,
            "description": self.description,
        }


def recipe_from_dict(data: dict[str, Any]) -> Recipe:
    """Build a recipe from a configuration mapping.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If a numeric field cannot be converted.
    """
    return Recipe(
        id=str(data["id"]),
        name=str(data.get("name", data["id"])),
        target_temperature=float(data["target_temperature"]),
        cook_duration=float(data.get("cook_duration", 0)),
        requires_enveloping_heat=bool(data.get("requires_enveloping_heat", False)),
        auto_starts_cooking=bool(data.get("auto_starts_cooking", False)),
        reservable=bool(data.get("reservable", False)),
        auto_detect=bool(data.get("auto_detect", False)),
        description=str(data.get("description", "")),
    )


DEFAULT_RECIPES: tuple[Recipe, ...] = (
    Recipe(
        id="auto",
        name="Auto detect",
        target_temperature=100.0,
        cook_duration=0.0,
        auto_detect=True,
        description="Infers vessel and cooking style from the heating curve",
    ),
    Recipe(
        id="pancake",
        name="Pancake",
        target_temperature=180.0,
        cook_duration=600.0,
        requires_enveloping_heat=True,
        auto_starts_cooking=True,
        description="Even heat across the whole pan, no center hot spot",
    ),
    Recipe(
        id="ramen",
        name="Ramen",
        target_temperature=100.0,
        cook_duration=240.0,
        reservable=True,
        description="550ml water, boil-over watch and dynamic power",
    ),
    Recipe(
        id="fish_fry",
        name="Fish fry",
        target_temperature=180.0,
        cook_duration=480.0,
        requires_enveloping_heat=True,
        description="Constant 180C oil bath",
    ),
    Recipe(
        id="boil_water",
        name="Boil water",
        target_temperature=100.0,
        cook_duration=0.0,
        reservable=True,
        description="Stops once the water boils",
    ),
)
