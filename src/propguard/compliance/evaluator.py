"""
Compliance evaluator for prop-firm rules.

Applies the active phase's rule slice to the computed metrics and produces
violations, a per-rule status (passed / failed / not applicable) and a
phase-progress verdict. Each rule is checked independently; several may
fire at once. Missing rules are reported as not applicable, never as
violations.
"""

import logging

from ..analytics.metrics import compute_metrics
from ..config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models.account import AccountSnapshot, require_valid_snapshot
from ..models.enums import Phase, RuleStatus, RuleType, Severity
from ..models.results import Evaluation, Metrics, PhaseProgress, Violation
from ..models.rules import LossLimit, PhaseRules, RuleSet
from .phases import next_phase


logger = logging.getLogger(__name__)

# Rule outcomes: a rule present in the mapping was evaluated; None means passed.
RuleOutcomes = dict[RuleType, Violation | None]


def evaluate(
    snapshot: AccountSnapshot,
    rule_set: RuleSet,
    *,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    metrics: Metrics | None = None,
) -> Evaluation:
    """
    Evaluate an account snapshot against its phase's rules.

    Args:
        snapshot: Account state at the evaluation instant.
        rule_set: Rule template; only the slice for
            ``snapshot.current_phase`` is used.
        config: Engine configuration (consistency severity, timezone).
        metrics: Precomputed metrics for ``snapshot``; computed when None.

    Returns:
        Evaluation with violations, rule statuses and phase progress.

    Raises:
        InvalidAccountDataError: If the snapshot has a non-positive starting
            balance or an unknown phase.

    Examples:
        >>> from datetime import UTC, datetime
        >>> snapshot = AccountSnapshot(
        ...     starting_balance=50_000.0,
        ...     current_phase="PHASE_1",
        ...     as_of=datetime(2025, 8, 21, tzinfo=UTC),
        ... )
        >>> result = evaluate(snapshot, RuleSet())
        >>> result.is_compliant, result.phase_progress.can_advance
        (True, False)
    """
    require_valid_snapshot(snapshot)

    if metrics is None:
        metrics = compute_metrics(
            snapshot.starting_balance,
            snapshot.trades,
            as_of=snapshot.as_of,
            config=config,
        )

    rules = rule_set.for_phase(snapshot.current_phase)
    outcomes: RuleOutcomes = {}
    if rules is None:
        logger.debug(
            "No rules for phase %s in template %s",
            snapshot.current_phase.value,
            rule_set.name,
        )
    else:
        start = snapshot.starting_balance
        outcomes.update(_check_daily_loss(rules, metrics, start))
        outcomes.update(_check_overall_loss(rules, metrics, start))
        severity = config.consistency_severity
        outcomes.update(_check_consistency(rules, metrics, severity))
        outcomes.update(_check_trading_days(rules, metrics))

    violations = tuple(v for v in outcomes.values() if v is not None)
    has_critical = any(v.is_critical for v in violations)

    progress, target_status = _phase_progress(
        snapshot.current_phase, rules, metrics, snapshot.starting_balance, has_critical
    )

    statuses = {rule_type: RuleStatus.NOT_APPLICABLE for rule_type in RuleType}
    for rule_type, violation in outcomes.items():
        statuses[rule_type] = (
            RuleStatus.PASSED if violation is None else RuleStatus.FAILED
        )
    statuses[RuleType.PROFIT_TARGET] = target_status

    evaluation = Evaluation(
        phase=snapshot.current_phase,
        is_compliant=not has_critical,
        violations=violations,
        phase_progress=progress,
        rule_statuses=statuses,
        metrics=metrics,
    )

    logger.debug(
        "Evaluated %s (%s): compliant=%s, violations=%d, can_advance=%s",
        snapshot.account_id or "account",
        snapshot.current_phase.value,
        evaluation.is_compliant,
        len(violations),
        progress.can_advance,
    )
    return evaluation


def _loss_violation(
    rule_type: RuleType,
    label: str,
    limit: LossLimit | None,
    pnl: float,
    starting_balance: float,
) -> RuleOutcomes:
    if limit is None or not limit.is_defined:
        return {}

    limit_percent = limit.percent(starting_balance)
    if pnl >= 0:
        return {rule_type: None}

    loss_percent = abs(pnl) / starting_balance * 100.0
    if loss_percent <= limit_percent:
        return {rule_type: None}

    return {
        rule_type: Violation(
            rule_type=rule_type,
            severity=Severity.CRITICAL,
            message=(
                f"{label} loss limit exceeded: "
                f"{loss_percent:.2f}% > {limit_percent:g}%"
            ),
            current_value=loss_percent,
            limit_value=limit_percent,
        )
    }


def _check_daily_loss(
    rules: PhaseRules, metrics: Metrics, starting_balance: float
) -> RuleOutcomes:
    return _loss_violation(
        RuleType.DAILY_LOSS,
        "Daily",
        rules.daily_loss_limit,
        metrics.daily_profit,
        starting_balance,
    )


def _check_overall_loss(
    rules: PhaseRules, metrics: Metrics, starting_balance: float
) -> RuleOutcomes:
    return _loss_violation(
        RuleType.OVERALL_LOSS,
        "Overall",
        rules.overall_loss_limit,
        metrics.total_profit,
        starting_balance,
    )


def _check_consistency(
    rules: PhaseRules, metrics: Metrics, severity: Severity
) -> RuleOutcomes:
    """
    50% protection rules.

    Only evaluated while the account is in profit: total profit must be at
    least ``multiple`` times the best day and the best single trade.
    """
    consistency = rules.consistency
    if consistency is None or not consistency.enabled or metrics.total_profit <= 0:
        return {}

    outcomes: RuleOutcomes = {}
    checks = (
        (
            RuleType.DAILY_PROTECTION,
            "Daily Protection",
            "best day",
            consistency.required_multiple_of_best_day,
            metrics.best_trading_day,
        ),
        (
            RuleType.TRADE_PROTECTION,
            "Trade Protection",
            "best trade",
            consistency.required_multiple_of_best_trade,
            metrics.best_single_trade,
        ),
    )
    for rule_type, label, subject, multiple, best in checks:
        if multiple is None:
            continue
        required = multiple * best
        if metrics.total_profit >= required:
            outcomes[rule_type] = None
            continue
        outcomes[rule_type] = Violation(
            rule_type=rule_type,
            severity=severity,
            message=(
                f"{label} violated: total profit {metrics.total_profit:.2f} "
                f"< {multiple:g}x {subject} {required:.2f}"
            ),
            current_value=metrics.total_profit,
            limit_value=required,
        )
    return outcomes


def _check_trading_days(rules: PhaseRules, metrics: Metrics) -> RuleOutcomes:
    outcomes: RuleOutcomes = {}
    days = metrics.trading_days

    if rules.min_trading_days:
        outcomes[RuleType.MIN_TRADING_DAYS] = None
        if days < rules.min_trading_days:
            outcomes[RuleType.MIN_TRADING_DAYS] = Violation(
                rule_type=RuleType.MIN_TRADING_DAYS,
                severity=Severity.WARNING,
                message=(
                    f"Minimum trading days not met: "
                    f"{days} < {rules.min_trading_days} days"
                ),
                current_value=float(days),
                limit_value=float(rules.min_trading_days),
            )

    if rules.max_trading_days is not None:
        outcomes[RuleType.MAX_TRADING_DAYS] = None
        if days > rules.max_trading_days:
            outcomes[RuleType.MAX_TRADING_DAYS] = Violation(
                rule_type=RuleType.MAX_TRADING_DAYS,
                severity=Severity.CRITICAL,
                message=(
                    f"Maximum trading days exceeded: "
                    f"{days} > {rules.max_trading_days} days"
                ),
                current_value=float(days),
                limit_value=float(rules.max_trading_days),
            )

    return outcomes


def _phase_progress(
    phase: Phase,
    rules: PhaseRules | None,
    metrics: Metrics,
    starting_balance: float,
    has_critical: bool,
) -> tuple[PhaseProgress, RuleStatus]:
    """Profit progress and the advancement recommendation."""
    target = rules.profit_target if rules is not None else None
    target_amount = target.amount(starting_balance) if target is not None else None

    if target_amount is None or target_amount <= 0:
        return (
            PhaseProgress(
                profit_progress_percent=None,
                days_progress=metrics.trading_days,
                can_advance=False,
            ),
            RuleStatus.NOT_APPLICABLE,
        )

    progress_percent = max(0.0, metrics.total_profit / target_amount * 100.0)
    target_met = metrics.total_profit >= target_amount
    if target_met:
        target_status = RuleStatus.PASSED
    elif target.required:
        target_status = RuleStatus.FAILED
    else:
        target_status = RuleStatus.NOT_APPLICABLE

    min_days = rules.min_trading_days
    days_met = not min_days or metrics.trading_days >= min_days
    successor = next_phase(phase)

    can_advance = (
        successor is not None
        and (target_met or not target.required)
        and days_met
        and not has_critical
    )

    return (
        PhaseProgress(
            profit_progress_percent=progress_percent,
            days_progress=metrics.trading_days,
            can_advance=can_advance,
            next_phase=successor if can_advance else None,
        ),
        target_status,
    )
