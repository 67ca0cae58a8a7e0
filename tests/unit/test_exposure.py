"""
Unit tests for open-position exposure helpers.
"""

import pytest

from propguard.models.account import OpenPosition
from propguard.risk.exposure import (
    base_currency,
    currency_concentration,
    simulate_stop_sequence,
)


pytestmark = pytest.mark.unit


class TestBaseCurrency:
    @pytest.mark.parametrize(
        ("symbol", "expected"),
        [
            ("EURUSD", "EUR"),
            ("EURUSD.p", "EUR"),
            ("gbpjpy", "GBP"),
            ("XAUUSD_i", "XAU"),
            ("USDJPY#", "USD"),
        ],
    )
    def test_broker_suffixes_ignored(self, symbol, expected):
        assert base_currency(symbol) == expected

    def test_concentration_sorted_by_count(self, make_position):
        positions = [
            make_position(1.0, symbol="GBPUSD"),
            make_position(1.0, symbol="EURUSD"),
            make_position(1.0, symbol="EURCHF"),
        ]
        assert list(currency_concentration(positions).items()) == [
            ("EUR", 2),
            ("GBP", 1),
        ]

    def test_no_positions(self):
        assert currency_concentration([]) == {}


class TestStopFold:
    def test_running_equity_and_floor(self, make_position):
        fold = simulate_stop_sequence(
            10_000.0,
            [make_position(300.0, ticket="1"), make_position(400.0, ticket="2")],
            breach_floor=9_500.0,
        )

        assert fold.total_stop_risk == pytest.approx(700.0)
        assert fold.min_equity_touched == pytest.approx(9_300.0)
        assert [s.violates_here for s in fold.steps] == [False, True]
        assert fold.unprotected == ()

    def test_without_floor_nothing_violates(self, make_position):
        fold = simulate_stop_sequence(
            100.0, [make_position(5_000.0)], breach_floor=None
        )

        assert fold.min_equity_touched == pytest.approx(-4_900.0)
        assert not fold.steps[0].violates_here

    def test_unprotected_makes_totals_unbounded(self, make_position):
        fold = simulate_stop_sequence(
            10_000.0,
            [make_position(100.0), make_position(protected=False, ticket="x")],
            breach_floor=9_000.0,
        )

        assert fold.total_stop_risk is None
        assert fold.min_equity_touched is None
        assert fold.unprotected == ("x",)
        assert fold.steps[1].loss_if_stopped is None
        assert fold.steps[1].running_equity == pytest.approx(9_900.0)

    def test_buy_risk_from_prices(self):
        position = OpenPosition(
            symbol="EURUSD",
            ticket="9",
            side="BUY",
            volume=2.0,
            open_price=1.0800,
            current_price=1.0850,
            stop_loss=1.0650,
        )
        assert position.risk_to_stop == pytest.approx(4_000.0)

    def test_stop_beyond_current_price_is_zero_risk(self):
        position = OpenPosition(
            symbol="EURUSD",
            ticket="9",
            side="BUY",
            volume=1.0,
            open_price=1.0800,
            current_price=1.0900,
            stop_loss=1.0950,
        )
        assert position.risk_to_stop == 0.0
