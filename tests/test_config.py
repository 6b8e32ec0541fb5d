"""Tests for settings and logging configuration."""

import pytest
from pydantic import ValidationError
from py_discharge.config import Settings
from py_discharge.core.propagation import DistanceMode
from py_discharge.core.simulation import SimulationConfig
from py_discharge.core.transport import AbsorbPolicy, ClampPolicy
from py_discharge.utils.logging import configure_logging


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        for name in ("GRID_WIDTH", "SCALING", "MAX_CHARGE", "DISTANCE_MODE", "CLAMP_POLICY"):
            monkeypatch.delenv(f"DISCHARGE_{name}", raising=False)
        settings = Settings()
        assert settings.grid_width == 256
        assert settings.scaling == 8
        assert settings.max_charge == 16
        assert settings.distance_mode == DistanceMode.UNIFORM
        assert settings.clamp_policy == ClampPolicy.CLAMP

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DISCHARGE_MAX_CHARGE", "32")
        monkeypatch.setenv("DISCHARGE_DISTANCE_MODE", "weighted")
        monkeypatch.setenv("DISCHARGE_ABSORB_POLICY", "clear")
        monkeypatch.setenv("DISCHARGE_INTERPOLATE_STROKES", "false")

        settings = Settings()

        assert settings.max_charge == 32
        assert settings.distance_mode == DistanceMode.WEIGHTED
        assert settings.absorb_policy == AbsorbPolicy.CLEAR
        assert settings.interpolate_strokes is False

    @pytest.mark.parametrize("name,value", [
        ("DISCHARGE_MAX_CHARGE", "0"),
        ("DISCHARGE_GRID_WIDTH", "-5"),
        ("DISCHARGE_CLAMP_POLICY", "maybe"),
    ])
    def test_invalid_environment(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            Settings()

    def test_simulation_config_from_settings(self, monkeypatch):
        monkeypatch.setenv("DISCHARGE_GRID_WIDTH", "40")
        monkeypatch.setenv("DISCHARGE_GRID_HEIGHT", "30")
        monkeypatch.setenv("DISCHARGE_CLAMP_POLICY", "none")

        config = SimulationConfig.from_settings(Settings(), height=12, max_charge=None)

        assert config.width == 40
        assert config.height == 12
        assert config.max_charge == 16
        assert config.clamp_policy == ClampPolicy.NONE


class TestLoggingConfig:
    """Test structlog setup."""

    @pytest.mark.parametrize("fmt", ["json", "plain"])
    def test_formats(self, fmt):
        configure_logging("DEBUG", fmt)
        configure_logging("INFO", "json")

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_logging("LOUD")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            configure_logging("INFO", "xml")
