"""
Rich renderers for engine results.

Text output only; JSON output goes through the ``to_dict`` methods of the
result records.
"""

from rich.console import Console
from rich.table import Table

from ..models.enums import RiskLevel, RuleStatus, Severity
from ..models.results import Evaluation, Metrics, RiskReport


_SEVERITY_STYLE = {
    Severity.INFO: "dim",
    Severity.WARNING: "yellow",
    Severity.CRITICAL: "bold red",
}

_STATUS_STYLE = {
    RuleStatus.PASSED: "green",
    RuleStatus.FAILED: "red",
    RuleStatus.NOT_APPLICABLE: "dim",
}

_RISK_STYLE = {
    RiskLevel.SAFE: "bold green",
    RiskLevel.CAUTION: "bold yellow",
    RiskLevel.DANGER: "bold red",
    RiskLevel.CRITICAL: "bold white on red",
}


def _money(value: float | None) -> str:
    return "unbounded" if value is None else f"${value:,.2f}"


def render_metrics(metrics: Metrics, console: Console) -> None:
    table = Table(title="Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Total profit", _money(metrics.total_profit))
    table.add_row("Closed profit", _money(metrics.closed_profit))
    table.add_row("Floating profit", _money(metrics.floating_profit))
    table.add_row("Today's profit", _money(metrics.daily_profit))
    table.add_row("Best trading day", _money(metrics.best_trading_day))
    table.add_row("Best single trade", _money(metrics.best_single_trade))
    table.add_row("Trading days", str(metrics.trading_days))
    table.add_row("Trades", str(metrics.total_trades))
    table.add_row("Closed trades", str(metrics.closed_trades))
    table.add_row("Win rate", f"{metrics.win_rate:.2f}%")
    table.add_row("Profit factor", f"{metrics.profit_factor:.2f}")
    table.add_row("Max drawdown", f"{metrics.current_drawdown:.2f}%")

    console.print(table)


def render_evaluation(evaluation: Evaluation, console: Console) -> None:
    """Print compliance verdict, rule statuses, violations and phase progress."""
    verdict = (
        "[bold green]COMPLIANT[/bold green]"
        if evaluation.is_compliant
        else "[bold red]NON-COMPLIANT[/bold red]"
    )
    console.print(f"\nPhase: [bold]{evaluation.phase.value}[/bold]  {verdict}")

    rules = Table(title="Rules")
    rules.add_column("Rule", style="cyan")
    rules.add_column("Status")
    for rule_type, status in evaluation.rule_statuses.items():
        style = _STATUS_STYLE[status]
        rules.add_row(rule_type.value, f"[{style}]{status.value}[/{style}]")
    console.print(rules)

    if evaluation.violations:
        violations = Table(title="Violations")
        violations.add_column("Severity")
        violations.add_column("Rule", style="cyan")
        violations.add_column("Message")
        for violation in evaluation.violations:
            style = _SEVERITY_STYLE[violation.severity]
            violations.add_row(
                f"[{style}]{violation.severity.value}[/{style}]",
                violation.rule_type.value,
                violation.message,
            )
        console.print(violations)

    progress = evaluation.phase_progress
    if progress.profit_progress_percent is None:
        target = "no profit target"
    else:
        target = f"{progress.profit_progress_percent:.1f}% of profit target"
    console.print(f"Progress: {target}, {progress.days_progress} trading day(s)")
    if progress.can_advance and progress.next_phase is not None:
        console.print(
            f"[bold green]Ready to advance to {progress.next_phase.value}[/bold green]"
        )


def render_risk(report: RiskReport, console: Console) -> None:
    """Print the safe-capacity report with the stop-loss trace and alerts."""
    style = _RISK_STYLE[report.risk_level]
    console.print(f"\nRisk level: [{style}]{report.risk_level.value}[/{style}]")

    summary = Table(title="Safe capacity")
    summary.add_column("Figure", style="cyan")
    summary.add_column("Value", justify="right")
    summary.add_row("Current equity", _money(report.current_equity))
    summary.add_row("Floating P&L", _money(report.floating_pl))
    summary.add_row("Daily limit", _money(report.daily_limit_usd))
    summary.add_row("Overall limit", _money(report.overall_limit_usd))
    summary.add_row("Daily margin left", _money(report.daily_margin_left))
    summary.add_row("Overall margin left", _money(report.overall_margin_left))
    summary.add_row(
        "Controlling limit",
        report.controlling_limit.value if report.controlling_limit else "none",
    )
    summary.add_row("Theoretical capacity", _money(report.theoretical_safe_capacity))
    summary.add_row("True capacity", _money(report.true_safe_capacity))
    summary.add_row("Total stop risk", _money(report.total_stop_risk))
    summary.add_row("Equity if all stops hit", _money(report.min_equity_touched))
    console.print(summary)

    if report.sequence:
        trace = Table(title="Stop-loss sequence")
        trace.add_column("Ticket", style="dim")
        trace.add_column("Symbol", style="cyan")
        trace.add_column("Loss if stopped", justify="right")
        trace.add_column("Running equity", justify="right")
        trace.add_column("Breach")
        for step in report.sequence:
            trace.add_row(
                step.ticket,
                step.symbol,
                _money(step.loss_if_stopped),
                _money(step.running_equity),
                "[red]yes[/red]" if step.violates_here else "no",
            )
        console.print(trace)

    for alert in report.alerts:
        alert_style = _SEVERITY_STYLE[alert.severity]
        console.print(
            f"[{alert_style}]{alert.severity.value}[/{alert_style}] "
            f"{alert.code}: {alert.message}"
        )
        if alert.action:
            console.print(f"  -> {alert.action}")


def render_templates(names: list[str], console: Console) -> None:
    table = Table(title=f"Rule templates ({len(names)})")
    table.add_column("Name", style="cyan")
    for name in names:
        table.add_row(name)
    console.print(table)
