"""
Unit tests for EngineConfig schema and defaults.
"""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from propguard.config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig
from propguard.models.enums import Severity
from propguard.models.exceptions import RuleConfigurationError


pytestmark = pytest.mark.unit


class TestDefaults:
    def test_defaults(self):
        config = EngineConfig()

        assert config.day_boundary_tz == "UTC"
        assert config.consistency_severity is Severity.WARNING
        assert config.profit_factor_cap == 999.0
        assert config.danger_threshold == 500.0
        assert config.caution_threshold == 1000.0
        assert config == DEFAULT_ENGINE_CONFIG

    def test_timezone_property(self):
        config = EngineConfig(day_boundary_tz="America/New_York")

        assert config.timezone == ZoneInfo("America/New_York")


class TestValidation:
    def test_unknown_timezone(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            EngineConfig(day_boundary_tz="Mars/Olympus")

    def test_info_consistency_rejected(self):
        with pytest.raises(ValidationError):
            EngineConfig(consistency_severity=Severity.INFO)

    def test_thresholds_must_be_ordered(self):
        with pytest.raises(ValidationError, match="danger_threshold"):
            EngineConfig(danger_threshold=1000.0, caution_threshold=500.0)

    def test_unknown_key_rejected(self):
        with pytest.raises(RuleConfigurationError, match="engine configuration"):
            EngineConfig.from_dict({"dayBoundary": "UTC"})

    def test_from_dict(self):
        config = EngineConfig.from_dict(
            {"day_boundary_tz": "Europe/Rome", "consistency_severity": "CRITICAL"}
        )

        assert config.consistency_severity is Severity.CRITICAL
        assert config.timezone == ZoneInfo("Europe/Rome")
