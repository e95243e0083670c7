"""Award lifecycle and the capabilities each phase allows."""

import enum
from typing import Optional, Union

from core.exceptions import Forbidden, ValidationError


class Phase(str, enum.Enum):
    NOMINATION = "NOMINATION"
    FINAL_VOTING = "FINAL_VOTING"
    RESULTS = "RESULTS"
    CLOSED = "CLOSED"


class Action(str, enum.Enum):
    VIEW_CANDIDATES = "view candidates"
    NOMINATE = "nominate"
    VOTE = "vote"
    VIEW_RESULTS = "view results"


NEXT_PHASE: dict[Phase, Optional[Phase]] = {
    Phase.NOMINATION: Phase.FINAL_VOTING,
    Phase.FINAL_VOTING: Phase.RESULTS,
    Phase.RESULTS: Phase.CLOSED,
    Phase.CLOSED: None,
}

PHASE_ACTIONS: dict[Phase, frozenset[Action]] = {
    Phase.NOMINATION: frozenset({Action.VIEW_CANDIDATES, Action.NOMINATE}),
    Phase.FINAL_VOTING: frozenset({Action.VIEW_CANDIDATES, Action.VOTE}),
    Phase.RESULTS: frozenset({Action.VIEW_RESULTS}),
    Phase.CLOSED: frozenset(),
}

# Phases in which non-admins see an award at all
OPEN_PHASES = frozenset({Phase.NOMINATION, Phase.FINAL_VOTING})


def next_phase(phase: Union[Phase, str]) -> Phase:
    """Return the phase one step after ``phase``.

    Raises ValidationError for CLOSED, which has no outgoing transition.
    """
    following = NEXT_PHASE[Phase(phase)]
    if following is None:
        raise ValidationError(f"Award is {Phase(phase).value} and cannot move to another phase")
    return following


def is_allowed(phase: Union[Phase, str], action: Action) -> bool:
    return action in PHASE_ACTIONS[Phase(phase)]


def ensure_allowed(phase: Union[Phase, str], action: Action) -> None:
    if not is_allowed(phase, action):
        raise Forbidden(f"You cannot {action.value} while the award is in the {Phase(phase).value} phase")
