"""Safe-capacity simulation and open-position exposure."""

from propguard.risk.capacity import classify_risk, compute_risk
from propguard.risk.exposure import (
    StopFold,
    base_currency,
    currency_concentration,
    simulate_stop_sequence,
)

__all__ = [
    "classify_risk",
    "compute_risk",
    "StopFold",
    "base_currency",
    "currency_concentration",
    "simulate_stop_sequence",
]
