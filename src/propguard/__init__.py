"""
propguard: prop-firm challenge compliance and risk engine.

Evaluates a trading account against its firm's phase rules (profit target,
daily and overall loss limits, consistency, trading days) and simulates the
worst case of every open stop loss to report a true safe capacity.
"""

from propguard.engine import EngineResult, run_engine

__version__ = "0.1.0"

__all__ = ["EngineResult", "run_engine", "__version__"]
