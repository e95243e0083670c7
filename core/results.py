"""Tallying and ranking of nominations and final votes.

Rankings sort by count descending; equal counts keep directory order
(lowest user id first), so repeated calls give identical output.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence
from uuid import UUID

from core.selection import NominationGroup


@dataclass(frozen=True)
class AwardResultRow:
    nominee_uuid: UUID
    full_name: str
    avatar_url: str
    vote_count: int


@dataclass(frozen=True)
class RankedPair:
    group: NominationGroup
    vote_count: int


def tally_nominations(nominee_ids: Iterable[int]) -> Counter:
    """Count nomination rows per nominee; each member of a duo pair has its own row."""
    return Counter(nominee_ids)


def tally_final_votes(
    votes: Iterable[tuple[Optional[int], Optional[UUID]]],
    group_members: Mapping[UUID, Sequence[int]],
) -> Counter:
    """Count final votes per nominee.

    ``votes`` yields ``(nominee_id, nomination_group_id)``; a group vote
    counts once for every member of the group.
    """
    tally: Counter = Counter()
    for nominee_id, group_id in votes:
        if nominee_id is not None:
            tally[nominee_id] += 1
        elif group_id is not None:
            for member_id in group_members.get(group_id, ()):
                tally[member_id] += 1
    return tally


def rank(tally: Mapping[int, int]) -> list[tuple[int, int]]:
    return sorted(
        ((nominee_id, count) for nominee_id, count in tally.items() if count > 0),
        key=lambda item: (-item[1], item[0]),
    )


def rank_pairs(groups: Iterable[NominationGroup]) -> list[RankedPair]:
    """Rank duo pairs by how many nominators chose them.

    Each distinct pair is represented by the first group seen for it, so
    ``groups`` should arrive in creation order.
    """
    representative: dict[frozenset, NominationGroup] = {}
    counts: Counter = Counter()
    for group in groups:
        representative.setdefault(group.key, group)
        counts[group.key] += 1

    ordered = sorted(counts.items(), key=lambda item: (-item[1], sorted(item[0])))
    return [RankedPair(group=representative[key], vote_count=count) for key, count in ordered]


def build_result_rows(ranked: Iterable[tuple[int, int]], users_by_id: Mapping[int, object]) -> list[AwardResultRow]:
    rows = []
    for nominee_id, count in ranked:
        user = users_by_id.get(nominee_id)
        if user is None:
            continue
        rows.append(
            AwardResultRow(
                nominee_uuid=user.uuid,
                full_name=user.full_name,
                avatar_url=user.display_avatar_url,
                vote_count=count,
            )
        )
    return rows
