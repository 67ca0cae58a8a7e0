"""
Unit tests for rule template loading.

Tests validate:
- Bundled presets load and resolve limits against the starting balance
- Legacy phase-keyed and category-keyed layouts
- ``rulesJson`` wrapper with template metadata
- Configuration errors for unknown templates, bad JSON and bad phases
"""

import json

import pytest

from propguard.config.loader import (
    list_templates,
    load_rule_set,
    load_rule_set_file,
    parse_rule_document,
)
from propguard.models.enums import Phase
from propguard.models.exceptions import RuleConfigurationError


pytestmark = pytest.mark.unit


class TestPresets:
    def test_bundled_templates_listed(self):
        names = list_templates()

        assert "propnumberone_50k" in names
        assert "futura_funding_10k" in names
        assert names == sorted(names)

    @pytest.mark.parametrize("name", list_templates())
    def test_every_preset_loads(self, name):
        rule_set = load_rule_set(name)

        assert rule_set.for_phase(Phase.PHASE_1) is not None

    def test_propnumberone_values(self):
        rule_set = load_rule_set("propnumberone_50k")
        phase_1 = rule_set.for_phase(Phase.PHASE_1)
        phase_2 = rule_set.for_phase(Phase.PHASE_2)
        funded = rule_set.for_phase(Phase.FUNDED)

        assert rule_set.firm == "PropNumberOne"
        assert rule_set.account_size == 50_000
        assert phase_1.daily_loss_limit.amount(50_000) == pytest.approx(2500.0)
        assert phase_1.overall_loss_limit.amount(50_000) == pytest.approx(5000.0)
        assert phase_2.consistency.enabled
        assert funded.profit_target is None

    def test_percent_scales_with_account(self):
        """Limits follow the snapshot's starting balance, not the template size."""
        phase_1 = load_rule_set("propnumberone_50k").for_phase(Phase.PHASE_1)

        assert phase_1.daily_loss_limit.amount(100_000) == pytest.approx(5000.0)

    def test_unknown_template(self):
        with pytest.raises(RuleConfigurationError, match="Unknown rule template"):
            load_rule_set("no_such_firm")


class TestLegacyLayouts:
    def test_phase_keyed_template(self):
        rule_set = parse_rule_document(
            {
                "name": "Futura 10k",
                "phase1": {
                    "profitTarget": 8,
                    "maxDailyLoss": 5,
                    "maxOverallLoss": 10,
                    "minTradingDays": 3,
                    "consistencyRules": True,
                    "tradeProtection": False,
                },
                "funded": {"maxDailyLoss": 5, "maxTotalLoss": 1000, "profitTarget": 0},
            }
        )
        phase_1 = rule_set.for_phase(Phase.PHASE_1)
        funded = rule_set.for_phase(Phase.FUNDED)

        assert rule_set.name == "Futura 10k"
        assert phase_1.profit_target.amount(10_000) == pytest.approx(800.0)
        assert phase_1.min_trading_days == 3
        assert phase_1.consistency.enabled
        assert phase_1.consistency.required_multiple_of_best_day == 2.0
        assert phase_1.consistency.required_multiple_of_best_trade is None
        assert funded.overall_loss_limit.amount(10_000) == pytest.approx(1000.0)
        assert funded.profit_target.required is False
        assert rule_set.for_phase(Phase.PHASE_2) is None

    def test_category_keyed_template(self):
        rule_set = parse_rule_document(
            {
                "profitTargets": {"PHASE_1": {"percentage": 10, "amount": 10_000}},
                "dailyLossLimits": {"PHASE_1": {"percentage": 5, "amount": 5000}},
                "overallLossLimits": {"PHASE_1": {"percentage": 10}},
                "minimumTradingDays": {"PHASE_1": {"days": 4}},
                "consistencyRules": {"PHASE_1": {"enabled": True}},
            }
        )
        phase_1 = rule_set.for_phase(Phase.PHASE_1)

        assert phase_1.profit_target.amount(100_000) == pytest.approx(10_000.0)
        assert phase_1.min_trading_days == 4
        assert phase_1.consistency.enabled

    def test_category_unknown_phase(self):
        with pytest.raises(RuleConfigurationError, match="Unknown phase"):
            parse_rule_document({"profitTargets": {"PHASE_3": {"percentage": 5}}})

    @pytest.mark.parametrize(
        "document",
        [
            {"profitTargets": {"PHASE_1": 8}},
            {"dailyLossLimits": [{"percentage": 5}]},
            {"minimumTradingDays": {"PHASE_1": None}},
        ],
    )
    def test_category_entry_must_be_object(self, document):
        with pytest.raises(RuleConfigurationError, match="must"):
            parse_rule_document(document)

    def test_rules_json_wrapper(self):
        rule_set = parse_rule_document(
            {
                "name": "Wrapped",
                "firm": "Example",
                "accountSize": 25_000,
                "rulesJson": {
                    "PHASE_1": {"dailyLossLimit": {"percentOfStartingBalance": 4}}
                },
            }
        )

        assert rule_set.name == "Wrapped"
        assert rule_set.account_size == 25_000
        assert rule_set.for_phase(Phase.PHASE_1).daily_loss_limit.percent(1) == 4.0


class TestFiles:
    def test_load_from_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(
            json.dumps({"PHASE_1": {"minTradingDays": 2}}), encoding="utf-8"
        )

        assert load_rule_set_file(path).for_phase(Phase.PHASE_1).min_trading_days == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuleConfigurationError, match="not found"):
            load_rule_set_file(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(RuleConfigurationError, match="not valid JSON"):
            load_rule_set_file(path)

    def test_invalid_utf8(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"name": "Caf\xe9 \xff"}')

        with pytest.raises(RuleConfigurationError, match="not valid UTF-8"):
            load_rule_set_file(path)

    def test_negative_threshold_rejected(self):
        with pytest.raises(RuleConfigurationError, match="Invalid rule set"):
            parse_rule_document(
                {"PHASE_1": {"dailyLossLimit": {"percentOfStartingBalance": -5}}}
            )

    def test_non_object_document(self):
        with pytest.raises(RuleConfigurationError, match="JSON object"):
            parse_rule_document([1, 2, 3])
