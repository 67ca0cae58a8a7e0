"""
Metrics calculator for prop-firm compliance.

This module derives the figures that compliance rules are written against:
realized and floating P&L, today's P&L, best trading day, best single trade,
trading-day count, win rate, profit factor and drawdown. Every amount uses
net P&L (gross + swap + commission); gross P&L alone is never used.

All metrics handle the zero-trade case gracefully and return zeros rather
than NaN, so downstream percentage checks never see undefined values.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

import numpy as np

from ..config.settings import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models.account import Trade
from ..models.exceptions import InvalidAccountDataError
from ..models.results import Metrics
from .daily import daily_net_pnl, trading_day
from .drawdown import compute_max_drawdown


logger = logging.getLogger(__name__)


def compute_metrics(
    starting_balance: float,
    trades: Sequence[Trade],
    *,
    as_of: datetime,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> Metrics:
    """
    Compute compliance metrics from a trade list and starting balance.

    Args:
        starting_balance: Balance at the start of the current phase.
        trades: Closed and open trades in any order.
        as_of: Evaluation instant; its calendar day (in
            ``config.day_boundary_tz``) is "today".
        config: Engine configuration.

    Returns:
        Metrics with all figures computed from scratch.

    Raises:
        InvalidAccountDataError: If ``starting_balance`` is not positive.

    Examples:
        >>> from datetime import UTC
        >>> metrics = compute_metrics(
        ...     10_000.0, [], as_of=datetime(2025, 8, 21, tzinfo=UTC)
        ... )
        >>> metrics.total_profit, metrics.win_rate, metrics.profit_factor
        (0.0, 0.0, 0.0)
    """
    if starting_balance <= 0:
        raise InvalidAccountDataError(
            "Starting balance must be positive",
            context={"starting_balance": starting_balance},
        )

    if not trades:
        logger.debug("No trades to compute metrics from")
        return Metrics()

    tz = config.timezone
    closed = [t for t in trades if t.is_closed]
    open_ = [t for t in trades if not t.is_closed]

    closed_pnl = np.array([t.net_pnl for t in closed], dtype=np.float64)
    closed_profit = float(np.sum(closed_pnl)) if closed else 0.0
    floating_profit = float(sum(t.net_pnl for t in open_))

    daily = daily_net_pnl(trades, tz)
    today = trading_day(as_of, tz)

    best_trading_day = max(max(daily.values()), 0.0)
    best_single_trade = max(float(np.max(closed_pnl)), 0.0) if closed else 0.0

    wins = closed_pnl[closed_pnl > 0]
    losses = closed_pnl[closed_pnl < 0]
    win_rate = len(wins) / len(closed) * 100.0 if closed else 0.0

    metrics = Metrics(
        total_profit=closed_profit + floating_profit,
        closed_profit=closed_profit,
        floating_profit=floating_profit,
        daily_profit=daily.get(today, 0.0),
        best_trading_day=best_trading_day,
        best_single_trade=best_single_trade,
        trading_days=len(daily),
        total_trades=len(trades),
        closed_trades=len(closed),
        win_rate=win_rate,
        profit_factor=compute_profit_factor(
            float(np.sum(wins)), float(np.sum(losses)), cap=config.profit_factor_cap
        ),
        current_drawdown=compute_max_drawdown(starting_balance, trades),
        daily_pnl=daily,
    )

    logger.debug(
        "Metrics computed: %d trades, total=%.2f, today=%.2f, win_rate=%.2f%%",
        metrics.total_trades,
        metrics.total_profit,
        metrics.daily_profit,
        metrics.win_rate,
    )
    return metrics


def compute_profit_factor(gross_profit: float, gross_loss: float, cap: float) -> float:
    """
    Profit factor from summed winning and losing net P&L.

    Returns ``cap`` when there is profit but no loss, and 0.0 when there is
    neither, so the result is always a finite non-negative number.

    Examples:
        >>> compute_profit_factor(300.0, -100.0, cap=999.0)
        3.0
        >>> compute_profit_factor(300.0, 0.0, cap=999.0)
        999.0
        >>> compute_profit_factor(0.0, 0.0, cap=999.0)
        0.0
    """
    loss = abs(gross_loss)
    if loss > 0:
        return min(gross_profit / loss, cap)
    return cap if gross_profit > 0 else 0.0
