"""Data models, enums and exceptions."""

from propguard.models.account import (
    AccountSnapshot,
    OpenPosition,
    Trade,
    require_valid_snapshot,
)
from propguard.models.enums import (
    LimitKind,
    OutputFormat,
    Phase,
    RiskLevel,
    RuleStatus,
    RuleType,
    Severity,
    TradeSide,
)
from propguard.models.exceptions import (
    EngineError,
    InvalidAccountDataError,
    RuleConfigurationError,
)
from propguard.models.results import (
    Evaluation,
    Metrics,
    PhaseProgress,
    RiskAlert,
    RiskReport,
    StopStep,
    Violation,
)
from propguard.models.rules import (
    ConsistencyRule,
    LossLimit,
    PhaseRules,
    ProfitTarget,
    RuleSet,
)

__all__ = [
    "AccountSnapshot",
    "OpenPosition",
    "Trade",
    "require_valid_snapshot",
    "LimitKind",
    "OutputFormat",
    "Phase",
    "RiskLevel",
    "RuleStatus",
    "RuleType",
    "Severity",
    "TradeSide",
    "EngineError",
    "InvalidAccountDataError",
    "RuleConfigurationError",
    "Evaluation",
    "Metrics",
    "PhaseProgress",
    "RiskAlert",
    "RiskReport",
    "StopStep",
    "Violation",
    "ConsistencyRule",
    "LossLimit",
    "PhaseRules",
    "ProfitTarget",
    "RuleSet",
]
