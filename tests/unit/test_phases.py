"""
Unit tests for the challenge phase state machine.
"""

import pytest

from propguard.compliance.phases import (
    PHASE_ORDER,
    advance,
    is_valid_transition,
    next_phase,
)
from propguard.models.enums import Phase
from propguard.models.exceptions import InvalidAccountDataError


pytestmark = pytest.mark.unit


class TestPhaseOrder:
    def test_order(self):
        assert PHASE_ORDER == (Phase.PHASE_1, Phase.PHASE_2, Phase.FUNDED)

    @pytest.mark.parametrize(
        ("phase", "expected"),
        [
            (Phase.PHASE_1, Phase.PHASE_2),
            (Phase.PHASE_2, Phase.FUNDED),
            (Phase.FUNDED, None),
        ],
    )
    def test_next_phase(self, phase, expected):
        assert next_phase(phase) is expected


class TestTransitions:
    def test_forward_step_allowed(self):
        assert is_valid_transition(Phase.PHASE_1, Phase.PHASE_2)
        assert advance(Phase.PHASE_2, Phase.FUNDED) is Phase.FUNDED

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (Phase.PHASE_2, Phase.PHASE_1),
            (Phase.PHASE_1, Phase.FUNDED),
            (Phase.FUNDED, Phase.FUNDED),
            (Phase.PHASE_1, Phase.PHASE_1),
        ],
    )
    def test_invalid_transitions_rejected(self, current, target):
        assert not is_valid_transition(current, target)
        with pytest.raises(InvalidAccountDataError, match="Invalid phase transition"):
            advance(current, target)
