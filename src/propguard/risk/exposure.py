"""
Open-position exposure helpers.

Provides the worst-case stop-loss fold used by the safe-capacity simulator
and a base-currency concentration count for correlated-exposure warnings.
"""

import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

from ..models.account import OpenPosition
from ..models.results import StopStep


_SYMBOL_SUFFIX = re.compile(r"[._\-#].*$")


@dataclass(frozen=True)
class StopFold:
    """
    Result of applying every protective stop in sequence.

    Attributes:
        steps: Per-position trace, in input order.
        total_stop_risk: Sum of losses if every stop is hit; None when any
            position is unprotected (unbounded).
        min_equity_touched: Equity after every stop is hit; None when
            unbounded.
        unprotected: Tickets of positions without a stop.
    """

    steps: tuple[StopStep, ...]
    total_stop_risk: float | None
    min_equity_touched: float | None
    unprotected: tuple[str, ...]


def simulate_stop_sequence(
    current_equity: float,
    positions: Sequence[OpenPosition],
    breach_floor: float | None,
) -> StopFold:
    """
    Fold the loss-if-stopped of each position into a running equity.

    The order of positions does not change the final equity, only the
    trace. Unprotected positions leave the running equity unchanged in the
    trace but make the totals unbounded.

    Args:
        current_equity: Equity before any stop is hit.
        positions: Open positions in reporting order.
        breach_floor: Equity below which a loss limit is breached; None
            when no limit applies.

    Examples:
        >>> fold = simulate_stop_sequence(
        ...     50_000.0,
        ...     [OpenPosition(symbol="EURUSD", ticket="1", stop_loss=1.0,
        ...                   loss_if_stopped=2_000.0)],
        ...     breach_floor=47_500.0,
        ... )
        >>> fold.min_equity_touched, fold.steps[0].violates_here
        (48000.0, False)
    """
    running = current_equity
    bounded_risk = 0.0
    steps: list[StopStep] = []
    unprotected: list[str] = []

    for position in positions:
        risk = position.risk_to_stop
        if risk is None:
            unprotected.append(position.ticket)
        else:
            bounded_risk += risk
            running -= risk

        steps.append(
            StopStep(
                ticket=position.ticket,
                symbol=position.symbol,
                loss_if_stopped=risk,
                running_equity=running,
                violates_here=breach_floor is not None and running < breach_floor,
            )
        )

    if unprotected:
        return StopFold(tuple(steps), None, None, tuple(unprotected))
    return StopFold(tuple(steps), bounded_risk, running, ())


def base_currency(symbol: str) -> str:
    """
    Base currency of a symbol, ignoring broker suffixes.

    Examples:
        >>> base_currency("EURUSD.p")
        'EUR'
        >>> base_currency("gbpjpy")
        'GBP'
    """
    return _SYMBOL_SUFFIX.sub("", symbol).upper()[:3]


def currency_concentration(positions: Sequence[OpenPosition]) -> dict[str, int]:
    """Number of open positions per base currency, most concentrated first."""
    counts = Counter(base_currency(p.symbol) for p in positions)
    return dict(counts.most_common())
