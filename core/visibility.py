from dataclasses import dataclass
from typing import Any, Collection, Sequence

from core.eligibility import is_eligible
from core.phases import OPEN_PHASES, Phase


@dataclass(frozen=True)
class AwardView:
    award: Any
    has_nominated: bool = False
    has_voted: bool = False


def can_nominate(award: Any, caller: Any) -> bool:
    return is_eligible(award.nomination_criteria, caller)


def can_vote(award: Any, caller: Any) -> bool:
    return is_eligible(award.voting_criteria, caller)


def is_visible_to(award: Any, caller: Any) -> bool:
    """Admins see everything; other users only active, open awards they can take part in."""
    if caller.is_admin:
        return True
    if not award.active or Phase(award.phase) not in OPEN_PHASES:
        return False
    return can_nominate(award, caller) or can_vote(award, caller)


def visible_awards(
    all_awards: Sequence[Any],
    caller: Any,
    nominated_award_ids: Collection[int] = frozenset(),
    voted_award_ids: Collection[int] = frozenset(),
) -> list[AwardView]:
    return [
        AwardView(
            award=award,
            has_nominated=award.id in nominated_award_ids,
            has_voted=award.id in voted_award_ids,
        )
        for award in all_awards
        if is_visible_to(award, caller)
    ]
