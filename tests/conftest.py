"""
Pytest configuration and global fixtures.

This module provides shared factories for trades, open positions, account
snapshots and rule sets. Every fixture evaluates against a fixed instant so
that "today" is deterministic.
"""

from datetime import UTC, datetime, timedelta

import pytest

from propguard.models.account import AccountSnapshot, OpenPosition, Trade
from propguard.models.rules import (
    ConsistencyRule,
    LossLimit,
    PhaseRules,
    ProfitTarget,
    RuleSet,
)


AS_OF = datetime(2025, 8, 21, 18, 0, tzinfo=UTC)
STARTING_BALANCE = 50_000.0


@pytest.fixture()
def as_of():
    """Fixed evaluation instant (2025-08-21 18:00 UTC)."""
    return AS_OF


@pytest.fixture()
def make_trade():
    """
    Provide a trade factory.

    ``days_ago`` moves the open time back by whole days from the evaluation
    day; trades open at 09:00 UTC and close an hour later unless ``closed``
    is False.

    Examples:
        >>> def test_something(make_trade):
        ...     trade = make_trade(250.0, days_ago=1)
        ...     assert trade.net_pnl == 250.0
    """
    counter = iter(range(1, 10_000))

    def _create(
        gross_pnl: float,
        *,
        days_ago: int = 0,
        closed: bool = True,
        swap: float | None = 0.0,
        commission: float | None = 0.0,
        symbol: str = "EURUSD",
        trade_id: str | None = None,
    ) -> Trade:
        opened = AS_OF.replace(hour=9) - timedelta(days=days_ago)
        return Trade(
            id=trade_id or str(next(counter)),
            symbol=symbol,
            side="BUY",
            volume=1.0,
            open_time=opened,
            close_time=opened + timedelta(hours=1) if closed else None,
            gross_pnl=gross_pnl,
            swap=swap,
            commission=commission,
        )

    return _create


@pytest.fixture()
def make_position():
    """Provide an open position factory with an explicit loss-if-stopped."""
    counter = iter(range(1000, 10_000))

    def _create(
        loss_if_stopped: float | None = None,
        *,
        protected: bool = True,
        floating_pnl: float = 0.0,
        symbol: str = "EURUSD",
        ticket: str | None = None,
    ) -> OpenPosition:
        return OpenPosition(
            symbol=symbol,
            ticket=ticket or str(next(counter)),
            side="BUY",
            volume=1.0,
            floating_pnl=floating_pnl,
            stop_loss=1.0 if protected else None,
            loss_if_stopped=loss_if_stopped if protected else None,
        )

    return _create


@pytest.fixture()
def make_snapshot():
    """Provide an account snapshot factory evaluated at ``AS_OF``."""

    def _create(
        trades=(),
        positions=(),
        *,
        phase: str = "PHASE_1",
        starting_balance: float = STARTING_BALANCE,
    ) -> AccountSnapshot:
        return AccountSnapshot(
            account_id="test-account",
            starting_balance=starting_balance,
            current_phase=phase,
            trades=tuple(trades),
            open_positions=tuple(positions),
            as_of=AS_OF,
        )

    return _create


@pytest.fixture()
def phase_rules():
    """
    Provide a PhaseRules factory.

    Defaults: 8% profit target, 5% daily loss, 10% overall loss, five
    minimum trading days and consistency disabled.
    """

    def _create(
        *,
        target_percent: float | None = 8.0,
        target_required: bool = True,
        daily_percent: float | None = 5.0,
        overall_percent: float | None = 10.0,
        min_trading_days: int | None = 5,
        max_trading_days: int | None = None,
        consistency: bool = False,
        best_trade_multiple: float | None = 2.0,
    ) -> PhaseRules:
        return PhaseRules(
            profit_target=(
                ProfitTarget(
                    percent_of_starting_balance=target_percent,
                    required=target_required,
                )
                if target_percent is not None
                else None
            ),
            daily_loss_limit=(
                LossLimit(percent_of_starting_balance=daily_percent)
                if daily_percent is not None
                else None
            ),
            overall_loss_limit=(
                LossLimit(percent_of_starting_balance=overall_percent)
                if overall_percent is not None
                else None
            ),
            min_trading_days=min_trading_days,
            max_trading_days=max_trading_days,
            consistency=ConsistencyRule(
                enabled=consistency,
                required_multiple_of_best_day=2.0,
                required_multiple_of_best_trade=best_trade_multiple,
            ),
        )

    return _create


@pytest.fixture()
def rule_set(phase_rules):
    """Two-step challenge rule set with funded rules and no funded target."""
    return RuleSet(
        name="test-50k",
        firm="Test Firm",
        account_size=STARTING_BALANCE,
        phase_1=phase_rules(),
        phase_2=phase_rules(target_percent=5.0),
        funded=phase_rules(target_percent=None, min_trading_days=None),
    )
