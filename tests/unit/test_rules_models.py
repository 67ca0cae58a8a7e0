"""
Unit tests for rule set models.
"""

import pytest
from pydantic import ValidationError

from propguard.models.enums import Phase
from propguard.models.exceptions import RuleConfigurationError
from propguard.models.rules import (
    ConsistencyRule,
    LossLimit,
    PhaseRules,
    ProfitTarget,
    RuleSet,
)


pytestmark = pytest.mark.unit


class TestLossLimit:
    def test_percent_resolves_against_starting_balance(self):
        limit = LossLimit(percent_of_starting_balance=5.0)

        assert limit.amount(50_000.0) == pytest.approx(2500.0)
        assert limit.percent(50_000.0) == 5.0

    def test_absolute_amount_fallback(self):
        limit = LossLimit(absolute_amount=1000.0)

        assert limit.amount(50_000.0) == 1000.0
        assert limit.percent(50_000.0) == pytest.approx(2.0)

    def test_percent_wins_when_both_given(self):
        limit = LossLimit(percent_of_starting_balance=5.0, absolute_amount=2500.0)

        assert limit.amount(100_000.0) == pytest.approx(5000.0)

    def test_undefined_limit(self):
        limit = LossLimit()

        assert not limit.is_defined
        assert limit.amount(50_000.0) is None
        assert limit.percent(50_000.0) is None

    @pytest.mark.parametrize("percent", [-1.0, 100.5])
    def test_percent_range(self, percent):
        with pytest.raises(ValidationError):
            LossLimit(percent_of_starting_balance=percent)

    def test_profit_target_required_by_default(self):
        assert ProfitTarget(percent_of_starting_balance=8.0).required


class TestPhaseRules:
    def test_min_days_cannot_exceed_max(self):
        with pytest.raises(ValidationError, match="exceeds"):
            PhaseRules(min_trading_days=10, max_trading_days=5)

    def test_consistency_defaults(self):
        rule = ConsistencyRule()

        assert not rule.enabled
        assert rule.required_multiple_of_best_day == 2.0
        assert rule.required_multiple_of_best_trade == 2.0

    def test_camel_case_keys(self):
        rules = PhaseRules.model_validate(
            {"dailyLossLimit": {"percentOfStartingBalance": 4}, "minTradingDays": 3}
        )

        assert rules.daily_loss_limit.percent_of_starting_balance == 4
        assert rules.min_trading_days == 3

    def test_frozen(self):
        rules = PhaseRules(min_trading_days=3)

        with pytest.raises(ValidationError):
            rules.min_trading_days = 4


class TestRuleSet:
    def test_for_phase(self):
        phase_1 = PhaseRules(min_trading_days=1)
        funded = PhaseRules(min_trading_days=0)
        rule_set = RuleSet(phase_1=phase_1, funded=funded)

        assert rule_set.for_phase(Phase.PHASE_1) is phase_1
        assert rule_set.for_phase(Phase.PHASE_2) is None
        assert rule_set.for_phase(Phase.FUNDED) is funded

    @pytest.mark.parametrize("key", ["PHASE_1", "phase1", "phase_1"])
    def test_phase_key_aliases(self, key):
        rule_set = RuleSet.from_dict({key: {"minTradingDays": 2}})

        assert rule_set.for_phase(Phase.PHASE_1).min_trading_days == 2

    def test_unknown_field_rejected(self):
        with pytest.raises(RuleConfigurationError, match="Invalid rule set") as info:
            RuleSet.from_dict({"PHASE_1": {"maxLotSize": 5}})

        assert "maxLotSize" in str(info.value)
