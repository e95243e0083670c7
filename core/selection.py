"""Validation of nomination selections and the duo pair value type."""

from dataclasses import dataclass
from typing import Hashable, Iterable, Optional, Sequence, TypeVar
from uuid import UUID

from core.exceptions import ValidationError

T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class NominationGroup:
    """One duo nomination: two distinct nominees sharing a group id."""
    group_id: Optional[UUID]
    members: tuple[Hashable, Hashable]

    def __post_init__(self):
        if len(self.members) != 2 or self.members[0] == self.members[1]:
            raise ValidationError("A pair must contain exactly two different people")

    @property
    def key(self) -> frozenset:
        """Order-independent identity of the pair, ignoring the group id."""
        return frozenset(self.members)

    @classmethod
    def from_records(cls, group_id: UUID, member_ids: Iterable) -> "NominationGroup":
        return cls(group_id=group_id, members=tuple(sorted(member_ids, key=str)))


def validate_flat_selection(
    selection: Sequence[T],
    max_nominations: int,
    nominator: T,
    partner: Optional[T] = None,
) -> list[T]:
    if not selection:
        raise ValidationError(f"You must select between 1 and {max_nominations} nominees")
    if len(set(selection)) != len(selection):
        raise ValidationError("Each nominee can only be selected once")
    if len(selection) > max_nominations:
        raise ValidationError(f"You must select between 1 and {max_nominations} nominees")
    if nominator in selection:
        raise ValidationError("You cannot nominate yourself")
    if partner is not None and partner in selection:
        raise ValidationError("You cannot nominate your partner")
    return list(selection)


def validate_pair_selection(
    selection: Sequence[Sequence[T]],
    max_nominations: int,
    nominator: T,
) -> list[NominationGroup]:
    if not selection:
        raise ValidationError(f"You must select between 1 and {max_nominations} pairs")
    if len(selection) > max_nominations:
        raise ValidationError(f"You must select between 1 and {max_nominations} pairs")

    groups: list[NominationGroup] = []
    seen_pairs: set[frozenset] = set()
    committed: set = set()
    for pair in selection:
        if len(pair) != 2:
            raise ValidationError("For this award, nominees must be in pairs")
        group = NominationGroup(group_id=None, members=tuple(pair))
        if group.key in seen_pairs:
            raise ValidationError("This pair has already been selected")
        if committed & group.key:
            raise ValidationError("A nominee can only appear in one pair")
        if nominator in group.key:
            raise ValidationError("You cannot nominate yourself")
        seen_pairs.add(group.key)
        committed |= group.key
        groups.append(group)
    return groups


def same_flat_selection(existing: Iterable, submitted: Iterable) -> bool:
    existing, submitted = list(existing), list(submitted)
    return len(existing) == len(submitted) and set(existing) == set(submitted)


def same_pair_selection(existing: Iterable[NominationGroup], submitted: Iterable[NominationGroup]) -> bool:
    """Pair sets are equal when they hold the same unordered pairs.

    Group ids and the order of pairs or of members within a pair are ignored.
    """
    existing_keys = [group.key for group in existing]
    submitted_keys = [group.key for group in submitted]
    return len(existing_keys) == len(submitted_keys) and set(existing_keys) == set(submitted_keys)


def groups_from_records(records: Iterable) -> list[NominationGroup]:
    """Rebuild duo pairs from nomination rows sharing a ``nomination_group_id``.

    Rows without a group id are skipped. Groups keep the order in which their
    first row appears.
    """
    members: dict[UUID, list] = {}
    for record in records:
        if record.nomination_group_id is None:
            continue
        members.setdefault(record.nomination_group_id, []).append(record.nominee_id)
    return [NominationGroup.from_records(group_id, ids) for group_id, ids in members.items()]
