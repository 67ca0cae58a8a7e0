"""
Enumerations for the compliance and risk engine.

This module defines type-safe enumerations for challenge phases, violation
severities, rule categories and risk levels. All enums inherit from str so
they serialize to JSON and parse from CLI arguments without conversion.
"""

from enum import Enum


class Phase(str, Enum):
    """
    Challenge phase enumeration.

    Phases progress strictly PHASE_1 -> PHASE_2 -> FUNDED and never move
    backward. See ``propguard.compliance.phases`` for the transition table.

    Examples:
        >>> Phase("PHASE_2") is Phase.PHASE_2
        True
        >>> Phase.FUNDED.value
        'FUNDED'
    """

    PHASE_1 = "PHASE_1"
    PHASE_2 = "PHASE_2"
    FUNDED = "FUNDED"


class TradeSide(str, Enum):
    """Direction of a trade or open position."""

    BUY = "BUY"
    SELL = "SELL"

    @property
    def direction(self) -> int:
        """Signed multiplier: +1 for BUY, -1 for SELL."""
        return 1 if self is TradeSide.BUY else -1


class Severity(str, Enum):
    """
    Severity attached to violations and risk alerts.

    Only CRITICAL violations affect compliance; WARNING and INFO are
    informational.
    """

    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class RuleType(str, Enum):
    """Rule categories checked by the compliance evaluator."""

    DAILY_LOSS = "DAILY_LOSS"
    OVERALL_LOSS = "OVERALL_LOSS"
    DAILY_PROTECTION = "DAILY_PROTECTION"
    TRADE_PROTECTION = "TRADE_PROTECTION"
    MIN_TRADING_DAYS = "MIN_TRADING_DAYS"
    MAX_TRADING_DAYS = "MAX_TRADING_DAYS"
    PROFIT_TARGET = "PROFIT_TARGET"


class RuleStatus(str, Enum):
    """
    Outcome of a single rule category.

    Attributes:
        PASSED: Rule was evaluated and satisfied.
        FAILED: Rule was evaluated and produced a violation.
        NOT_APPLICABLE: Rule is absent or disabled for the active phase.
    """

    PASSED = "PASSED"
    FAILED = "FAILED"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class LimitKind(str, Enum):
    """Loss limit that binds the remaining capacity."""

    DAILY = "DAILY"
    OVERALL = "OVERALL"


class RiskLevel(str, Enum):
    """
    Account risk level, ordered from safest to most severe.

    Examples:
        >>> RiskLevel.DANGER.rank > RiskLevel.CAUTION.rank
        True
    """

    SAFE = "SAFE"
    CAUTION = "CAUTION"
    DANGER = "DANGER"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        """Ordinal position used for comparisons (SAFE=0 ... CRITICAL=3)."""
        return list(RiskLevel).index(self)


class OutputFormat(str, Enum):
    """
    CLI output format enumeration.

    Attributes:
        TEXT: Human-readable tables rendered with rich (default).
        JSON: Machine-readable JSON for programmatic consumers.
    """

    TEXT = "text"
    JSON = "json"
