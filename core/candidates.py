"""Who a user is shown as nominable or votable for an award."""

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union
from uuid import UUID

from core.eligibility import is_eligible
from core.phases import Phase
from core.results import rank, rank_pairs, tally_nominations
from core.selection import NominationGroup


@dataclass(frozen=True)
class Candidate:
    """A single nominee, or a duo pair when ``group_id`` is set."""
    user: Optional[Any] = None
    group_id: Optional[UUID] = None
    members: tuple = ()

    @property
    def is_duo(self) -> bool:
        return self.group_id is not None


def nomination_candidates(award: Any, all_users: Sequence[Any]) -> list[Candidate]:
    return [
        Candidate(user=user)
        for user in all_users
        if is_eligible(award.nomination_criteria, user)
    ]


def finalists(
    award: Any,
    all_users: Sequence[Any],
    nominee_ids: Sequence[int] = (),
    groups: Sequence[NominationGroup] = (),
) -> list[Candidate]:
    """Top ``award.finalist_count`` nominees of the nomination tally."""
    users_by_id = {user.id: user for user in all_users}

    if award.is_duo:
        candidates = []
        for ranked in rank_pairs(groups):
            members = tuple(users_by_id[i] for i in ranked.group.members if i in users_by_id)
            if len(members) != 2:
                continue
            candidates.append(Candidate(group_id=ranked.group.group_id, members=members))
        return candidates[:award.finalist_count]

    candidates = [
        Candidate(user=users_by_id[nominee_id])
        for nominee_id, _ in rank(tally_nominations(nominee_ids))
        if nominee_id in users_by_id
    ]
    return candidates[:award.finalist_count]


def resolve_candidates(
    award: Any,
    phase: Union[Phase, str],
    all_users: Sequence[Any],
    nominee_ids: Sequence[int] = (),
    groups: Sequence[NominationGroup] = (),
) -> list[Candidate]:
    """Candidates for ``award`` in ``phase``.

    NOMINATION gives every eligible directory user in directory order,
    FINAL_VOTING gives the finalists, and later phases give nothing.
    """
    phase = Phase(phase)
    if phase == Phase.NOMINATION:
        return nomination_candidates(award, all_users)
    if phase == Phase.FINAL_VOTING:
        return finalists(award, all_users, nominee_ids, groups)
    return []
