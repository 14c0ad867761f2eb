"""Configuration management for the cooktop control core."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .recipes import DEFAULT_RECIPES, Recipe, recipe_from_dict

logger = logging.getLogger(__name__)


def _load_dotenv(env_path: Path) -> None:
    """Load environment variables from .env file."""
    if not env_path.exists():
        return

    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                # Only set if not already in environment
                if key not in os.environ:
                    os.environ[key] = value


@dataclass
class ControlConfig:
    """Discrete power levels and anti-overshoot band.

    Power levels are integers on the 0..10 coil scale.
    Temperature margins are in degrees Celsius relative to the target.
    """

    max_power: int = 10
    initial_power: int = 10  # Preheat level for direct-heat recipes
    direct_power: int = 8  # Nominal cooking level, direct heat
    enveloping_power: int = 6  # Nominal level, enveloping heat (gentler)
    keep_warm_power: int = 2
    maintenance_power: int = 1
    minimum_power: int = 1  # Hazard throttle level
    target_tolerance: float = 0.5  # "target reached" when center >= target - tolerance
    band_below: float = 2.0  # Maintenance band starts at target - band_below
    overshoot_margin: float = 1.0  # Power cut at target + overshoot_margin
    proportional_gain: float = 0.5


@dataclass
class DetectorConfig:
    """Boil-over and disturbance thresholds.

    These are tuned constants, not a validated physical model.
    """

    boil_over_threshold: float = 35.0
    boil_over_recovery: float = 20.0
    disturbance_probability: float = 0.001  # Per tick, CookingActive only
    disturbance_temp_jump: float = 8.0  # |center delta| per tick
    disturbance_recovery_ticks: int = 15
    starch_froth_factor: float = 4.0


@dataclass
class ClassifierConfig:
    """Rate-of-rise buckets (deg C per tick) and vessel heuristics."""

    min_history_ticks: int = 10
    frying_rate: float = 1.2
    pan_searing_rate: float = 0.8
    boiling_rate: float = 0.35
    simmering_rate: float = 0.1
    # Material from rise magnitude
    aluminum_rate: float = 0.9
    stainless_rate: float = 0.3
    # Size from peripheral/center rise ratio
    large_ratio: float = 0.85
    medium_ratio: float = 0.7
    # Alignment from peripheral rise spread (coefficient of variation)
    eccentric_spread: float = 0.15
    # Target temperature adopted once the cooking type is known
    type_targets: dict[str, float] = field(default_factory=lambda: {
        "BOILING": 100.0,
        "FRYING": 180.0,
        "PAN_SEARING": 200.0,
        "SIMMERING": 90.0,
    })


@dataclass
class SafetyConfig:
    """Unattended-appliance shutdown."""

    auto_off_seconds: float = 600.0  # 10 minutes in COMPLETE


@dataclass
class ReservationConfig:
    """Deferred start scheduling."""

    preheat_buffer_seconds: float = 180.0


@dataclass
class SimulationConfig:
    """Process model settings used when no hardware feed is attached."""

    ambient_temp_c: float = 22.0
    max_temp_c: float = 260.0
    thermal_mass: float = 1.0
    ingredient_temp_drop: float = 3.0
    # Coil coupling of the eight outer sensors; uneven values model an off-center vessel
    peripheral_coupling: list[float] = field(default_factory=lambda: [1.0] * 8)
    seed: Optional[int] = None


@dataclass
class CooktopConfig:
    """Main configuration class for the cooktop control core.

    All temperature values are in Celsius.
    All durations are in seconds.
    """

    control: ControlConfig = field(default_factory=ControlConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    reservation: ReservationConfig = field(default_factory=ReservationConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    # Fixed control period (200ms in the reference appliance)
    tick_interval: float = 0.2

    # Ring buffer size for sensor history
    history_capacity: int = 60

    # API settings
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"

    recipes: list[Recipe] = field(default_factory=lambda: list(DEFAULT_RECIPES))

    @property
    def auto_off_ticks(self) -> int:
        """Tick threshold equivalent to safety.auto_off_seconds."""
        return int(round(self.safety.auto_off_seconds / self.tick_interval))

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """Look up a recipe in the catalogue by id."""
        for recipe in self.recipes:
            if recipe.id == recipe_id:
                return recipe
        return None


def load_config(
    config_path: Path | None = None,
    env: str | None = None,
) -> CooktopConfig:
    """Load configuration from YAML files and environment variables.

    Configuration is loaded with the following priority (highest to lowest):
    1. Environment variables (COOKTOP_*)
    2. Environment-specific config (development.yaml, production.yaml)
    3. Default config (default.yaml)
    4. Hardcoded defaults

    Args:
        config_path: Path to config directory. Defaults to project config/.
        env: Environment name. Defaults to COOKTOP_ENV or "development".

    Returns:
        Loaded CooktopConfig instance.
    """
    config = CooktopConfig()

    # Determine config directory
    if config_path is None:
        # Try relative to this file, then fall back to cwd
        # src/cooktop/config.py -> project root
        config_path = Path(__file__).resolve().parents[2] / "config"
        if not config_path.exists():
            config_path = Path.cwd() / "config"

    # Load .env file from project root (config_path/../.env)
    _load_dotenv(config_path.parent / ".env")

    default_path = config_path / "default.yaml"
    if default_path.exists():
        config = _merge_yaml(config, default_path)
        logger.debug("Loaded default config from %s", default_path)

    if env is None:
        env = os.environ.get("COOKTOP_ENV", "development")

    env_config_path = config_path / f"{env}.yaml"
    if env_config_path.exists():
        config = _merge_yaml(config, env_config_path)
        logger.debug("Loaded %s config from %s", env, env_config_path)

    # Override with environment variables (highest priority)
    config = _apply_env_overrides(config)
    _check_ranges(config)

    logger.info("Configuration loaded for environment: %s", env)
    return config


def _coerce(default: Any, value: Any) -> Any:
    """Convert a YAML value to the type of the field's current value.

    Raises:
        TypeError, ValueError: The value cannot stand in for the default.
    """
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise TypeError(f"expected true/false, got {value!r}")
        return value
    if isinstance(value, bool) and isinstance(default, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    if isinstance(default, int):
        if isinstance(value, float) and not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        return int(value)
    if isinstance(default, float):
        return float(value)
    if isinstance(default, str):
        if not isinstance(value, str):
            raise TypeError(f"expected a string, got {value!r}")
        return value
    if isinstance(default, list):
        if not isinstance(value, list) or len(value) != len(default):
            raise ValueError(f"expected a list of {len(default)} numbers, got {value!r}")
        return [_coerce(d, v) for d, v in zip(default, value)]
    if isinstance(default, dict):
        if not isinstance(value, dict):
            raise TypeError(f"expected a mapping, got {value!r}")
        return {str(k): float(v) for k, v in value.items()}
    # Optional fields (seed) default to None
    return None if value is None else int(value)


def _merge_section(section: Any, data: dict[str, Any], name: str) -> None:
    """Copy known keys from a YAML mapping onto a config dataclass.

    Values that cannot be converted to the field's type are logged and
    the current value is kept.
    """
    known = {f.name for f in fields(section)}
    for key, value in data.items():
        if key not in known:
            logger.warning("Unknown %s setting ignored: %s", name, key)
            continue
        _set_checked(section, key, value, f"{name}.{key}")


def _set_checked(target: Any, attr: str, value: Any, label: str) -> None:
    try:
        setattr(target, attr, _coerce(getattr(target, attr), value))
    except (TypeError, ValueError) as e:
        logger.warning("Invalid config value %s=%r, keeping %r: %s", label, value, getattr(target, attr), e)


def _merge_yaml(config: CooktopConfig, path: Path) -> CooktopConfig:
    """Merge YAML file into config."""
    with open(path) as f:
        data = yaml.safe_load(f)

    if data is None:
        return config

    for name in ("control", "detector", "classifier", "safety", "reservation", "simulation"):
        section = data.get(name)
        if isinstance(section, dict):
            _merge_section(getattr(config, name), section, name)
        elif section is not None:
            logger.warning("Config section %s must be a mapping, ignored", name)

    api = data.get("api") if isinstance(data.get("api"), dict) else {}
    for key, attr in (("host", "api_host"), ("port", "api_port")):
        if key in api:
            _set_checked(config, attr, api[key], f"api.{key}")

    for key in ("log_level", "tick_interval", "history_capacity"):
        if key in data:
            _set_checked(config, key, data[key], key)

    if "recipes" in data:
        recipes: list[Recipe] = []
        for entry in data["recipes"] or []:
            try:
                recipes.append(recipe_from_dict(entry))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Invalid recipe entry in %s: %s", path, e)
        if recipes:
            config.recipes = recipes

    return config


def _apply_env_overrides(config: CooktopConfig) -> CooktopConfig:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str | None, Any]] = {
        "COOKTOP_TICK_INTERVAL": ("tick_interval", None, float),
        "COOKTOP_HISTORY_CAPACITY": ("history_capacity", None, int),
        "COOKTOP_API_HOST": ("api_host", None, str),
        "COOKTOP_API_PORT": ("api_port", None, int),
        "COOKTOP_LOG_LEVEL": ("log_level", None, str),
        "COOKTOP_SEED": ("simulation", "seed", int),
        "COOKTOP_AMBIENT_TEMP": ("simulation", "ambient_temp_c", float),
        "COOKTOP_THERMAL_MASS": ("simulation", "thermal_mass", float),
        "COOKTOP_AUTO_OFF_SECONDS": ("safety", "auto_off_seconds", float),
        "COOKTOP_PREHEAT_BUFFER": ("reservation", "preheat_buffer_seconds", float),
        "COOKTOP_BOILOVER_THRESHOLD": ("detector", "boil_over_threshold", float),
        "COOKTOP_DISTURBANCE_PROBABILITY": ("detector", "disturbance_probability", float),
    }

    for env_var, (attr, sub_attr, converter) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                converted = converter(value)
                if sub_attr:
                    setattr(getattr(config, attr), sub_attr, converted)
                else:
                    setattr(config, attr, converted)
                logger.debug("Applied env override: %s=%s", env_var, converted)
            except (ValueError, TypeError) as e:
                logger.warning("Invalid env var %s=%s: %s", env_var, value, e)

    return config


def _check_ranges(config: CooktopConfig) -> None:
    """Restore defaults for values the control loop cannot run with."""
    defaults = CooktopConfig()
    checks = [
        (config, "tick_interval", lambda v: v > 0, defaults),
        (config, "history_capacity", lambda v: v >= 1, defaults),
        (config.safety, "auto_off_seconds", lambda v: v >= 0, defaults.safety),
        (config.simulation, "thermal_mass", lambda v: v > 0, defaults.simulation),
        (config.detector, "disturbance_probability", lambda v: 0.0 <= v <= 1.0, defaults.detector),
    ]
    for target, attr, valid, default_section in checks:
        value = getattr(target, attr)
        if not valid(value):
            default = getattr(default_section, attr)
            logger.warning("Config value %s=%r out of range, using %r", attr, value, default)
            setattr(target, attr, default)
