"""
Safe-capacity simulator.

Computes how much more the account can lose before breaching a loss limit.
Two figures are reported:

- theoretical safe capacity: the binding limit minus losses realized so far.
  It ignores open positions and therefore overstates safety;
- true safe capacity: the theoretical figure minus the loss of every open
  position's protective stop. A position without a stop is unbounded risk
  and forces the true capacity to zero.

The simulator never reports a capacity derived only from loss-to-date.
"""

import logging

from ..analytics.daily import trades_on_day, trading_day
from ..config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models.account import AccountSnapshot, require_valid_snapshot
from ..models.enums import LimitKind, RiskLevel, Severity
from ..models.results import RiskAlert, RiskReport
from ..models.rules import LossLimit, RuleSet
from .exposure import StopFold, currency_concentration, simulate_stop_sequence


logger = logging.getLogger(__name__)


def compute_risk(
    snapshot: AccountSnapshot,
    rule_set: RuleSet,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> RiskReport:
    """
    Build the risk report for an account snapshot.

    Args:
        snapshot: Account state including open positions with their stops.
        rule_set: Rule template; the slice for the current phase supplies
            the daily and overall loss limits.
        config: Engine configuration (risk thresholds, timezone).

    Returns:
        RiskReport with margins, theoretical and true capacity, the
        worst-case stop trace, risk level and alerts.

    Raises:
        InvalidAccountDataError: If the snapshot has a non-positive starting
            balance or an unknown phase.
    """
    require_valid_snapshot(snapshot)

    start = snapshot.starting_balance
    tz = config.timezone
    rules = rule_set.for_phase(snapshot.current_phase)
    positions = snapshot.open_positions

    floating_pl = sum(p.floating_pnl for p in positions)
    current_equity = start + floating_pl

    daily_limit_usd = _limit_usd(rules.daily_loss_limit if rules else None, start)
    overall_limit_usd = _limit_usd(rules.overall_loss_limit if rules else None, start)

    closed = snapshot.closed_trades
    closed_only_balance = start + sum(t.net_pnl for t in closed)
    total_losses_from_start = max(0.0, start - closed_only_balance)

    today = trading_day(snapshot.as_of, tz)
    closed_today = sum(t.net_pnl for t in trades_on_day(closed, today, tz))
    daily_realized_loss = max(0.0, -closed_today)

    daily_margin = _margin(daily_limit_usd, daily_realized_loss)
    overall_margin = _margin(overall_limit_usd, total_losses_from_start)

    controlling, theoretical, controlling_limit_usd = _controlling_limit(
        daily_margin, overall_margin, daily_limit_usd, overall_limit_usd
    )

    breach_floor = (
        start - controlling_limit_usd if controlling_limit_usd is not None else None
    )
    fold = simulate_stop_sequence(current_equity, positions, breach_floor)

    if fold.unprotected:
        true_capacity: float | None = 0.0
    elif theoretical is None:
        true_capacity = None
    else:
        true_capacity = max(0.0, theoretical - fold.total_stop_risk)

    if breach_floor is None:
        would_violate = False
    elif fold.unprotected:
        would_violate = True
    else:
        would_violate = fold.min_equity_touched < breach_floor

    risk_level = classify_risk(true_capacity, bool(fold.unprotected), config)
    concentration = currency_concentration(positions)
    alerts = _build_alerts(
        snapshot,
        fold,
        theoretical,
        true_capacity,
        would_violate,
        concentration,
        config,
    )

    report = RiskReport(
        phase=snapshot.current_phase,
        current_equity=current_equity,
        floating_pl=floating_pl,
        daily_limit_usd=daily_limit_usd,
        overall_limit_usd=overall_limit_usd,
        daily_realized_loss=daily_realized_loss,
        total_losses_from_start=total_losses_from_start,
        daily_margin_left=daily_margin,
        overall_margin_left=overall_margin,
        controlling_limit=controlling,
        theoretical_safe_capacity=theoretical,
        true_safe_capacity=true_capacity,
        total_stop_risk=fold.total_stop_risk,
        min_equity_touched=fold.min_equity_touched,
        would_violate=would_violate,
        sequence=fold.steps,
        unprotected_positions=fold.unprotected,
        risk_level=risk_level,
        alerts=alerts,
        currency_exposure=concentration,
    )

    logger.debug(
        "Risk for %s: controlling=%s theoretical=%s true=%s level=%s",
        snapshot.account_id or "account",
        controlling.value if controlling else None,
        theoretical,
        true_capacity,
        risk_level.value,
    )
    return report


def classify_risk(
    true_capacity: float | None,
    has_unprotected: bool,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> RiskLevel:
    """
    Map true safe capacity to a risk level.

    Thresholds are inclusive and monotonic: lower capacity never yields a
    safer level. None (no loss limit applies) is SAFE unless a position is
    unprotected.

    Examples:
        >>> classify_risk(500.0, False)
        <RiskLevel.DANGER: 'DANGER'>
        >>> classify_risk(1500.0, False)
        <RiskLevel.SAFE: 'SAFE'>
        >>> classify_risk(5000.0, True)
        <RiskLevel.CRITICAL: 'CRITICAL'>
    """
    if has_unprotected or (true_capacity is not None and true_capacity <= 0):
        return RiskLevel.CRITICAL
    if true_capacity is None:
        return RiskLevel.SAFE
    if true_capacity <= config.danger_threshold:
        return RiskLevel.DANGER
    if true_capacity <= config.caution_threshold:
        return RiskLevel.CAUTION
    return RiskLevel.SAFE


def _limit_usd(limit: LossLimit | None, starting_balance: float) -> float | None:
    if limit is None:
        return None
    return limit.amount(starting_balance)


def _margin(limit_usd: float | None, loss: float) -> float | None:
    if limit_usd is None:
        return None
    return max(0.0, limit_usd - loss)


def _controlling_limit(
    daily_margin: float | None,
    overall_margin: float | None,
    daily_limit_usd: float | None,
    overall_limit_usd: float | None,
) -> tuple[LimitKind | None, float | None, float | None]:
    """Binding limit: the smaller margin, DAILY on ties."""
    if daily_margin is None and overall_margin is None:
        return None, None, None
    if overall_margin is None or (
        daily_margin is not None and daily_margin <= overall_margin
    ):
        return LimitKind.DAILY, daily_margin, daily_limit_usd
    return LimitKind.OVERALL, overall_margin, overall_limit_usd


def _build_alerts(
    snapshot: AccountSnapshot,
    fold: StopFold,
    theoretical: float | None,
    true_capacity: float | None,
    would_violate: bool,
    concentration: dict[str, int],
    config: EngineConfig,
) -> tuple[RiskAlert, ...]:
    alerts: list[RiskAlert] = []

    unprotected = set(fold.unprotected)
    for position in snapshot.open_positions:
        if position.ticket in unprotected:
            alerts.append(
                RiskAlert(
                    severity=Severity.CRITICAL,
                    code="NO_STOP_LOSS",
                    message=(
                        f"NO STOP LOSS on {position.symbol} #{position.ticket}: "
                        "risk is unbounded"
                    ),
                    action="Set a stop loss immediately to protect the account",
                )
            )

    if would_violate and not unprotected:
        alerts.append(
            RiskAlert(
                severity=Severity.CRITICAL,
                code="SEQUENTIAL_VIOLATION",
                message=(
                    "Hitting every stop loss would breach the loss limit: "
                    f"equity would fall to {fold.min_equity_touched:.2f}"
                ),
                action="Tighten stops or reduce position sizes",
            )
        )

    if (
        theoretical is not None
        and true_capacity is not None
        and theoretical > 0
        and theoretical - true_capacity >= config.masking_threshold_ratio * theoretical
    ):
        floating_pl = sum(p.floating_pnl for p in snapshot.open_positions)
        alerts.append(
            RiskAlert(
                severity=Severity.WARNING,
                code="FLOATING_PROFIT_MASKING",
                message=(
                    f"Theoretical capacity {theoretical:.2f} overstates true "
                    f"capacity {true_capacity:.2f} (floating P&L {floating_pl:+.2f})"
                ),
                action="Size new trades against the true safe capacity",
            )
        )

    for currency, count in concentration.items():
        if count >= config.correlation_min_positions:
            alerts.append(
                RiskAlert(
                    severity=Severity.WARNING,
                    code="CURRENCY_CONCENTRATION",
                    message=f"High {currency} concentration: {count} positions",
                    action=f"Consider diversifying beyond {currency} pairs",
                )
            )

    return tuple(alerts)
