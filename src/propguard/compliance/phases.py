"""
Challenge phase state machine.

Phases move strictly forward, PHASE_1 -> PHASE_2 -> FUNDED, and FUNDED is
terminal. The engine only recommends a transition; applying it (and
resetting the starting balance for the new phase) belongs to the caller.
"""

from typing import assert_never

from ..models.enums import Phase
from ..models.exceptions import InvalidAccountDataError


PHASE_ORDER: tuple[Phase, ...] = (Phase.PHASE_1, Phase.PHASE_2, Phase.FUNDED)


def next_phase(phase: Phase) -> Phase | None:
    """
    Phase that follows ``phase``, or None when ``phase`` is terminal.

    Examples:
        >>> next_phase(Phase.PHASE_1)
        <Phase.PHASE_2: 'PHASE_2'>
        >>> next_phase(Phase.FUNDED) is None
        True
    """
    match phase:
        case Phase.PHASE_1:
            return Phase.PHASE_2
        case Phase.PHASE_2:
            return Phase.FUNDED
        case Phase.FUNDED:
            return None
        case _:
            assert_never(phase)


def is_valid_transition(current: Phase, target: Phase) -> bool:
    """True only for a single forward step in the phase order."""
    return next_phase(current) is target


def advance(current: Phase, target: Phase) -> Phase:
    """
    Validate and apply a phase transition.

    Raises:
        InvalidAccountDataError: If ``target`` is not the phase directly
            after ``current`` (backward, skipped or terminal transitions).
    """
    if not is_valid_transition(current, target):
        raise InvalidAccountDataError(
            "Invalid phase transition",
            context={"from": current.value, "to": target.value},
        )
    return target
