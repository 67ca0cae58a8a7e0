"""
Drawdown computation on the account equity curve.

The equity curve starts at the starting balance and adds each trade's net
P&L in chronological order (by open time). Drawdown at each step is the
distance below the running high-water mark, expressed as a percentage of
the starting balance, so the figure is comparable to loss-limit rules.
"""

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from ..models.account import Trade


logger = logging.getLogger(__name__)


def equity_curve(
    starting_balance: float, trades: Sequence[Trade]
) -> NDArray[np.float64]:
    """
    Running equity after each trade, ordered by open time.

    Examples:
        >>> equity_curve(1000.0, [])
        array([], dtype=float64)
    """
    if not trades:
        return np.array([], dtype=np.float64)

    ordered = sorted(trades, key=lambda t: t.open_time)
    pnl = np.array([t.net_pnl for t in ordered], dtype=np.float64)
    return starting_balance + np.cumsum(pnl)


def compute_drawdown_curve(
    starting_balance: float, trades: Sequence[Trade]
) -> NDArray[np.float64]:
    """
    Drawdown (percent of starting balance) after each trade; all values >= 0.

    The high-water mark starts at the starting balance, so a first losing
    trade already counts as drawdown.
    """
    equity = equity_curve(starting_balance, trades)
    if equity.size == 0:
        return equity

    high_water = np.maximum.accumulate(np.maximum(equity, starting_balance))
    drawdown = (high_water - equity) / starting_balance * 100.0

    logger.debug(
        "Computed drawdown curve: %d points, max_dd=%.2f%%",
        drawdown.size,
        float(np.max(drawdown)),
    )
    return drawdown


def compute_max_drawdown(starting_balance: float, trades: Sequence[Trade]) -> float:
    """
    Maximum peak-to-trough drawdown as percent of starting balance.

    Returns 0.0 when there are no trades or equity never fell below a peak.
    """
    drawdown = compute_drawdown_curve(starting_balance, trades)
    if drawdown.size == 0:
        return 0.0
    return float(np.max(drawdown))
