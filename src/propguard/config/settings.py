"""
Engine configuration with pydantic validation.

EngineConfig holds the policy knobs that are not part of a prop firm's rule
template: the timezone that defines a trading day, the severity attached to
consistency failures and the capacity thresholds behind each risk level.
"""

from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from ..models.enums import Severity
from ..models.exceptions import RuleConfigurationError
from ..models.rules import describe_validation_error


class EngineConfig(BaseModel):
    """
    Policy configuration for metrics, compliance and risk evaluation.

    Attributes:
        day_boundary_tz: IANA timezone whose midnight splits trading days.
            Trades are bucketed by their open time in this zone.
        consistency_severity: Severity of a failed consistency check.
            WARNING keeps the account compliant; CRITICAL blocks compliance
            and phase advancement.
        profit_factor_cap: Profit factor reported when there are winning
            trades but no losing trades.
        danger_threshold: True safe capacity at or below which the risk
            level is DANGER.
        caution_threshold: True safe capacity at or below which the risk
            level is CAUTION. Must exceed ``danger_threshold``.
        masking_threshold_ratio: Fraction of theoretical capacity consumed
            by open-position risk that triggers the floating-profit alert.
        correlation_min_positions: Open positions sharing a base currency
            that trigger a concentration warning.

    Examples:
        >>> config = EngineConfig()
        >>> config.day_boundary_tz
        'UTC'
        >>> config.consistency_severity
        <Severity.WARNING: 'WARNING'>
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    day_boundary_tz: str = "UTC"
    consistency_severity: Severity = Severity.WARNING
    profit_factor_cap: float = Field(default=999.0, gt=0.0)
    danger_threshold: float = Field(default=500.0, ge=0.0)
    caution_threshold: float = Field(default=1000.0, ge=0.0)
    masking_threshold_ratio: float = Field(default=0.25, gt=0.0, le=1.0)
    correlation_min_positions: int = Field(default=3, ge=2)

    @field_validator("day_boundary_tz")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Timezone must be resolvable by zoneinfo."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("consistency_severity")
    @classmethod
    def validate_consistency_severity(cls, value: Severity) -> Severity:
        """Consistency failures are either WARNING or CRITICAL."""
        if value is Severity.INFO:
            raise ValueError("consistency_severity must be WARNING or CRITICAL")
        return value

    @model_validator(mode="after")
    def validate_thresholds(self) -> "EngineConfig":
        """Risk level thresholds must be monotonic."""
        if self.danger_threshold >= self.caution_threshold:
            raise ValueError(
                f"danger_threshold ({self.danger_threshold}) must be below "
                f"caution_threshold ({self.caution_threshold})"
            )
        return self

    @property
    def timezone(self) -> ZoneInfo:
        """ZoneInfo for ``day_boundary_tz``."""
        return ZoneInfo(self.day_boundary_tz)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "EngineConfig":
        """
        Create EngineConfig from a dictionary (e.g., parsed JSON).

        Raises:
            RuleConfigurationError: If a value is out of range.
        """
        try:
            return cls.model_validate(config_dict)
        except ValidationError as exc:
            raise RuleConfigurationError(
                "Invalid engine configuration",
                context={"detail": describe_validation_error(exc)},
            ) from exc


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
