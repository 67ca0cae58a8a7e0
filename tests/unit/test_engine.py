"""
Unit tests for the engine facade.
"""

import json

import pytest

from propguard import run_engine
from propguard.config.settings import EngineConfig
from propguard.models.enums import RiskLevel, Severity
from propguard.models.exceptions import InvalidAccountDataError
from propguard.models.rules import RuleSet


pytestmark = pytest.mark.unit


class TestRunEngine:
    def test_combines_metrics_evaluation_and_risk(
        self, make_trade, make_position, make_snapshot, rule_set
    ):
        snapshot = make_snapshot(
            [make_trade(1000.0), make_trade(-300.0)], [make_position(2000.0)]
        )
        result = run_engine(snapshot, rule_set)

        assert result.metrics.daily_profit == pytest.approx(700.0)
        assert result.evaluation.metrics == result.metrics
        assert result.evaluation.is_compliant
        assert result.risk.true_safe_capacity == pytest.approx(500.0)
        assert result.risk.risk_level is RiskLevel.DANGER
        assert not result.requires_attention

    def test_config_is_threaded_through(self, make_trade, make_snapshot, phase_rules):
        rules = RuleSet(phase_1=phase_rules(consistency=True, min_trading_days=None))
        snapshot = make_snapshot(
            [make_trade(3000.0, days_ago=1), make_trade(2000.0)]
        )
        config = EngineConfig(consistency_severity=Severity.CRITICAL)

        assert run_engine(snapshot, rules).evaluation.is_compliant
        result = run_engine(snapshot, rules, config)
        assert not result.evaluation.is_compliant
        assert result.requires_attention

    def test_unprotected_position_requires_attention(
        self, make_position, make_snapshot, rule_set
    ):
        snapshot = make_snapshot(positions=[make_position(protected=False)])
        result = run_engine(snapshot, rule_set)

        assert result.evaluation.is_compliant
        assert result.requires_attention

    def test_result_serializes_to_json(
        self, make_trade, make_position, make_snapshot, rule_set
    ):
        snapshot = make_snapshot([make_trade(250.0)], [make_position(100.0)])
        data = json.loads(json.dumps(run_engine(snapshot, rule_set).to_dict()))

        assert set(data) == {"metrics", "evaluation", "risk"}
        assert data["risk"]["risk_level"] == "SAFE"

    def test_rejects_invalid_balance(self, make_snapshot, rule_set):
        with pytest.raises(InvalidAccountDataError):
            run_engine(make_snapshot(starting_balance=0.0), rule_set)
