"""
Result records produced by the engine.

All records are frozen dataclasses: they are computed from scratch on every
call and never mutated afterwards. ``to_dict`` methods return plain,
JSON-serializable structures for the presentation layer, with enum members
rendered as their string values.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from .enums import LimitKind, Phase, RiskLevel, RuleStatus, RuleType, Severity


def _plain(value: Any) -> Any:
    """Recursively convert enums and dates into JSON-friendly values."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {_plain(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


@dataclass(frozen=True)
class Metrics:
    """
    Trading metrics derived from a trade list and starting balance.

    Attributes:
        total_profit: Net P&L of all trades, closed and open.
        closed_profit: Net P&L of closed trades only.
        floating_profit: Net P&L of trades still open.
        daily_profit: Net P&L of trades opened on the evaluation day.
        best_trading_day: Largest daily net P&L, floored at 0.
        best_single_trade: Largest closed-trade net P&L, floored at 0.
        trading_days: Distinct calendar days with an opened trade.
        total_trades: Number of trades, closed and open.
        closed_trades: Number of closed trades.
        win_rate: Winning closed trades as a percentage (0-100).
        profit_factor: Winning net P&L over absolute losing net P&L.
        current_drawdown: Maximum peak-to-trough drawdown, percent of
            starting balance.
        daily_pnl: Net P&L per calendar day (keyed by open date).
    """

    total_profit: float = 0.0
    closed_profit: float = 0.0
    floating_profit: float = 0.0
    daily_profit: float = 0.0
    best_trading_day: float = 0.0
    best_single_trade: float = 0.0
    trading_days: int = 0
    total_trades: int = 0
    closed_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    current_drawdown: float = 0.0
    daily_pnl: dict[date, float] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return _plain(asdict(self))


@dataclass(frozen=True)
class Violation:
    """A single rule violation reported by the compliance evaluator."""

    rule_type: RuleType
    severity: Severity
    message: str
    current_value: float
    limit_value: float

    @property
    def is_critical(self) -> bool:
        """True for violations that break compliance."""
        return self.severity is Severity.CRITICAL


@dataclass(frozen=True)
class PhaseProgress:
    """
    Progress towards completing the current phase.

    Attributes:
        profit_progress_percent: Total profit as a percentage of the profit
            target; None when the phase has no target.
        days_progress: Trading days completed so far.
        can_advance: True when the account may move to ``next_phase``.
        next_phase: Recommended next phase; only set when ``can_advance``.
    """

    profit_progress_percent: float | None
    days_progress: int
    can_advance: bool
    next_phase: Phase | None = None


@dataclass(frozen=True)
class Evaluation:
    """Compliance verdict for one account snapshot."""

    phase: Phase
    is_compliant: bool
    violations: tuple[Violation, ...]
    phase_progress: PhaseProgress
    rule_statuses: dict[RuleType, RuleStatus]
    metrics: Metrics

    @property
    def critical_violations(self) -> list[Violation]:
        """Violations with CRITICAL severity."""
        return [v for v in self.violations if v.is_critical]

    def status_of(self, rule_type: RuleType) -> RuleStatus:
        """Outcome of a rule category (NOT_APPLICABLE when never checked)."""
        return self.rule_statuses.get(rule_type, RuleStatus.NOT_APPLICABLE)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return _plain(asdict(self))


@dataclass(frozen=True)
class StopStep:
    """One step of the worst-case stop-loss fold."""

    ticket: str
    symbol: str
    loss_if_stopped: float | None
    running_equity: float
    violates_here: bool


@dataclass(frozen=True)
class RiskAlert:
    """Alert raised by the safe-capacity simulator."""

    severity: Severity
    code: str
    message: str
    action: str | None = None


@dataclass(frozen=True)
class RiskReport:
    """
    Remaining loss capacity of an account.

    ``theoretical_safe_capacity`` ignores open-position risk and therefore
    overstates safety; ``true_safe_capacity`` subtracts the loss of every
    open position's protective stop. Capacities are None when no loss limit
    applies to the active phase (unbounded) and no unprotected position
    forces them to zero.
    """

    phase: Phase
    current_equity: float
    floating_pl: float
    daily_limit_usd: float | None
    overall_limit_usd: float | None
    daily_realized_loss: float
    total_losses_from_start: float
    daily_margin_left: float | None
    overall_margin_left: float | None
    controlling_limit: LimitKind | None
    theoretical_safe_capacity: float | None
    true_safe_capacity: float | None
    total_stop_risk: float | None
    min_equity_touched: float | None
    would_violate: bool
    sequence: tuple[StopStep, ...]
    unprotected_positions: tuple[str, ...]
    risk_level: RiskLevel
    alerts: tuple[RiskAlert, ...]
    currency_exposure: dict[str, int] = field(default_factory=dict)

    @property
    def critical_alerts(self) -> list[RiskAlert]:
        """Alerts with CRITICAL severity."""
        return [a for a in self.alerts if a.severity is Severity.CRITICAL]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return _plain(asdict(self))
