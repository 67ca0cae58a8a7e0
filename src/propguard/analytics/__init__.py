"""Trade analytics: daily bucketing, drawdown and compliance metrics."""

from propguard.analytics.daily import daily_net_pnl, trades_on_day, trading_day
from propguard.analytics.drawdown import (
    compute_drawdown_curve,
    compute_max_drawdown,
    equity_curve,
)
from propguard.analytics.metrics import compute_metrics, compute_profit_factor

__all__ = [
    "daily_net_pnl",
    "trades_on_day",
    "trading_day",
    "compute_drawdown_curve",
    "compute_max_drawdown",
    "equity_curve",
    "compute_metrics",
    "compute_profit_factor",
]
