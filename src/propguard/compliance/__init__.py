"""Rule evaluation and the challenge phase state machine."""

from propguard.compliance.evaluator import evaluate
from propguard.compliance.phases import (
    PHASE_ORDER,
    advance,
    is_valid_transition,
    next_phase,
)

__all__ = [
    "evaluate",
    "PHASE_ORDER",
    "advance",
    "is_valid_transition",
    "next_phase",
]
