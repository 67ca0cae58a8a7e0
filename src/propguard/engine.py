"""
Engine facade.

Runs the metrics calculator, the compliance evaluator and the safe-capacity
simulator against one snapshot. Each run is a pure function of its inputs:
nothing is cached between calls.
"""

import logging
from dataclasses import dataclass
from typing import Any

from .analytics.metrics import compute_metrics
from .compliance.evaluator import evaluate
from .config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig
from .models.account import AccountSnapshot, require_valid_snapshot
from .models.results import Evaluation, Metrics, RiskReport
from .models.rules import RuleSet
from .risk.capacity import compute_risk


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EngineResult:
    """Combined output of a single engine run."""

    metrics: Metrics
    evaluation: Evaluation
    risk: RiskReport

    @property
    def requires_attention(self) -> bool:
        """True when the account is non-compliant or any risk alert is critical."""
        return not self.evaluation.is_compliant or bool(self.risk.critical_alerts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": self.metrics.to_dict(),
            "evaluation": self.evaluation.to_dict(),
            "risk": self.risk.to_dict(),
        }


def run_engine(
    snapshot: AccountSnapshot,
    rule_set: RuleSet,
    config: EngineConfig | None = None,
) -> EngineResult:
    """
    Evaluate compliance and risk for an account snapshot.

    Args:
        snapshot: Account state at the evaluation instant.
        rule_set: Rule template for the firm and account size.
        config: Engine configuration; defaults apply when None.

    Returns:
        EngineResult with metrics, evaluation and risk report.

    Raises:
        InvalidAccountDataError: If the snapshot cannot be evaluated.
    """
    config = config or DEFAULT_ENGINE_CONFIG
    require_valid_snapshot(snapshot)

    logger.debug(
        "Running engine for %s in %s with template %s",
        snapshot.account_id or "account",
        snapshot.current_phase.value,
        rule_set.name,
    )

    metrics = compute_metrics(
        snapshot.starting_balance,
        snapshot.trades,
        as_of=snapshot.as_of,
        config=config,
    )
    evaluation = evaluate(snapshot, rule_set, config=config, metrics=metrics)
    risk = compute_risk(snapshot, rule_set, config=config)

    return EngineResult(metrics=metrics, evaluation=evaluation, risk=risk)
