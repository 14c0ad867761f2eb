"""Tests for configuration loading."""

import os
from pathlib import Path

import pytest

from cooktop.config import CooktopConfig, load_config


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Config directory with default and test environment files."""
    directory = tmp_path / "config"
    directory.mkdir()
    (directory / "default.yaml").write_text(
        "tick_interval: 0.1\n"
        "history_capacity: 30\n"
        "api:\n"
        "  host: 127.0.0.1\n"
        "  port: 9000\n"
        "detector:\n"
        "  boil_over_threshold: 40.0\n"
        "  bogus_key: 1\n"
        "recipes:\n"
        "  - id: tea\n"
        "    name: Tea\n"
        "    target_temperature: 85\n"
        "    reservable: true\n"
        "  - name: broken entry\n"
    )
    (directory / "test.yaml").write_text(
        "log_level: DEBUG\n"
        "simulation:\n"
        "  seed: 7\n"
    )
    return directory


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop COOKTOP_* variables leaking from the host environment."""
    for key in list(os.environ):
        if key.startswith("COOKTOP_"):
            monkeypatch.delenv(key, raising=False)


class TestDefaults:
    """Test hardcoded defaults."""

    def test_default_tick_and_history(self) -> None:
        config = CooktopConfig()
        assert config.tick_interval == 0.2
        assert config.history_capacity == 60
        assert config.api_host == "127.0.0.1"

    def test_auto_off_ticks(self) -> None:
        """Ten minutes at 200ms is 3000 ticks."""
        assert CooktopConfig().auto_off_ticks == 3000

    def test_default_catalogue(self) -> None:
        config = CooktopConfig()
        ids = [r.id for r in config.recipes]
        assert ids == ["auto", "pancake", "ramen", "fish_fry", "boil_water"]
        assert config.get_recipe("missing") is None


class TestYamlLoading:
    """Test YAML merge order."""

    def test_default_yaml_applied(self, config_dir: Path) -> None:
        config = load_config(config_dir, env="production")
        assert config.tick_interval == 0.1
        assert config.history_capacity == 30
        assert config.api_port == 9000
        assert config.detector.boil_over_threshold == 40.0

    def test_unknown_keys_ignored(self, config_dir: Path) -> None:
        config = load_config(config_dir, env="production")
        assert not hasattr(config.detector, "bogus_key")

    def test_environment_file_overrides(self, config_dir: Path) -> None:
        config = load_config(config_dir, env="test")
        assert config.log_level == "DEBUG"
        assert config.simulation.seed == 7
        assert config.tick_interval == 0.1

    def test_recipes_replace_catalogue(self, config_dir: Path) -> None:
        """Valid entries replace the catalogue; broken ones are skipped."""
        config = load_config(config_dir, env="production")
        assert [r.id for r in config.recipes] == ["tea"]
        tea = config.get_recipe("tea")
        assert tea.target_temperature == 85.0
        assert tea.reservable
        assert tea.is_instantaneous

    def test_missing_directory_uses_defaults(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nope", env="test")
        assert config.tick_interval == 0.2


class TestEnvOverrides:
    """Test COOKTOP_* environment overrides."""

    def test_env_beats_yaml(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKTOP_TICK_INTERVAL", "0.05")
        monkeypatch.setenv("COOKTOP_SEED", "99")
        monkeypatch.setenv("COOKTOP_BOILOVER_THRESHOLD", "50")
        config = load_config(config_dir, env="test")
        assert config.tick_interval == 0.05
        assert config.simulation.seed == 99
        assert config.detector.boil_over_threshold == 50.0

    def test_invalid_env_value_ignored(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKTOP_API_PORT", "not-a-port")
        config = load_config(config_dir, env="production")
        assert config.api_port == 9000

    def test_env_selects_environment(self, config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COOKTOP_ENV", "test")
        config = load_config(config_dir)
        assert config.simulation.seed == 7

    def test_dotenv_file_loaded(self, config_dir: Path) -> None:
        """A .env beside the config directory feeds overrides."""
        (config_dir.parent / ".env").write_text("# local\nCOOKTOP_AUTO_OFF_SECONDS=30\n")
        try:
            config = load_config(config_dir, env="production")
        finally:
            os.environ.pop("COOKTOP_AUTO_OFF_SECONDS", None)
        assert config.safety.auto_off_seconds == 30.0


class TestValidation:
    """Bad values are logged and the previous value is kept."""

    def _write(self, tmp_path: Path, text: str) -> Path:
        directory = tmp_path / "config"
        directory.mkdir()
        (directory / "default.yaml").write_text(text)
        return directory

    def test_non_numeric_threshold_keeps_default(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        directory = self._write(tmp_path, "detector:\n  boil_over_threshold: high\n")
        config = load_config(directory, env="production")
        assert config.detector.boil_over_threshold == 35.0
        assert "detector.boil_over_threshold" in caplog.text

    def test_numbers_converted_to_field_type(self, tmp_path: Path) -> None:
        directory = self._write(
            tmp_path,
            "safety:\n  auto_off_seconds: 300\n"
            "detector:\n  disturbance_recovery_ticks: 20.0\n",
        )
        config = load_config(directory, env="production")
        assert isinstance(config.safety.auto_off_seconds, float)
        assert config.detector.disturbance_recovery_ticks == 20
        assert isinstance(config.detector.disturbance_recovery_ticks, int)

    def test_boolean_rejected_for_number(self, tmp_path: Path) -> None:
        directory = self._write(tmp_path, "control:\n  direct_power: true\n")
        config = load_config(directory, env="production")
        assert config.control.direct_power == 8

    def test_zero_tick_interval_rejected(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        directory = self._write(tmp_path, "tick_interval: 0\n")
        config = load_config(directory, env="production")
        assert config.tick_interval == 0.2
        assert config.auto_off_ticks == 3000
        assert "tick_interval" in caplog.text

    def test_zero_tick_interval_from_env_rejected(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("COOKTOP_TICK_INTERVAL", "-1")
        config = load_config(tmp_path / "nope", env="production")
        assert config.tick_interval == 0.2

    def test_short_coupling_list_rejected(self, tmp_path: Path) -> None:
        directory = self._write(tmp_path, "simulation:\n  peripheral_coupling: [1.0, 0.5]\n")
        config = load_config(directory, env="production")
        assert config.simulation.peripheral_coupling == [1.0] * 8

    def test_coupling_list_of_eight_accepted(self, tmp_path: Path) -> None:
        directory = self._write(
            tmp_path, "simulation:\n  peripheral_coupling: [1, 1, 1, 1, 0.5, 0.5, 0.5, 0.5]\n"
        )
        config = load_config(directory, env="production")
        assert config.simulation.peripheral_coupling == [1.0, 1.0, 1.0, 1.0, 0.5, 0.5, 0.5, 0.5]

    def test_bad_port_keeps_default(self, tmp_path: Path) -> None:
        directory = self._write(tmp_path, "api:\n  port: eighty\n")
        config = load_config(directory, env="production")
        assert config.api_port == 8000

    def test_section_must_be_mapping(self, tmp_path: Path) -> None:
        directory = self._write(tmp_path, "detector: 5\n")
        config = load_config(directory, env="production")
        assert config.detector.boil_over_threshold == 35.0
