import logging
import uuid as uuid_lib
from typing import Any, Sequence, Union
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import CallerIdentity
from core.eligibility import is_eligible
from core.exceptions import ValidationError
from core.selection import (
    NominationGroup,
    groups_from_records,
    same_flat_selection,
    same_pair_selection,
    validate_flat_selection,
    validate_pair_selection,
)
from crud.user_crud import user_crud as UserCrud
from models import Award, Nomination, UserModel

logger = logging.getLogger(__name__)

Selection = Union[Sequence[UUID], Sequence[Sequence[UUID]]]


def nominator_lock_stmt(nominator_id: int):
    return select(UserModel.id).where(UserModel.id == nominator_id).with_for_update()


class NominationCrud:

    def __init__(self):
        self.table = Nomination

    async def get_nominations(self, session: AsyncSession, award_id: int, nominator_id: int) -> Sequence[Nomination]:
        stmt = (
            select(Nomination)
            .where(Nomination.award_id == award_id, Nomination.nominator_id == nominator_id)
            .order_by(Nomination.id)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_award_nominations(self, session: AsyncSession, award_id: int) -> Sequence[Nomination]:
        stmt = select(Nomination).where(Nomination.award_id == award_id).order_by(Nomination.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_nominations_by_user(self, session: AsyncSession, user_id: int) -> Sequence[Any]:
        stmt = (
            select(
                Award.uuid.label("award_uuid"),
                UserModel.uuid.label("nominee_uuid"),
                Nomination.nomination_group_id,
            )
            .select_from(Nomination)
            .join(Award, Nomination.award_id == Award.id)
            .join(UserModel, Nomination.nominee_id == UserModel.id)
            .where(Nomination.nominator_id == user_id)
            .order_by(Award.display_order, Award.id, Nomination.id)
        )
        result = await session.execute(stmt)
        return result.fetchall()

    async def get_nominated_award_ids(self, session: AsyncSession, user_id: int) -> set[int]:
        stmt = select(Nomination.award_id).where(Nomination.nominator_id == user_id).distinct()
        result = await session.execute(stmt)
        return {row[0] for row in result.fetchall()}

    async def get_group_members(self, session: AsyncSession, award_id: int) -> dict[UUID, list[int]]:
        records = await self.get_award_nominations(session, award_id)
        return {group.group_id: list(group.members) for group in groups_from_records(records)}

    async def lock_nominator(self, session: AsyncSession, nominator_id: int) -> None:
        """Hold the nominator's user row until the transaction ends.

        Concurrent submissions by the same nominator queue here, so each one
        reads the set the previous one committed. No-op on SQLite, which
        serializes writers anyway.
        """
        await session.execute(nominator_lock_stmt(nominator_id))

    async def replace_nominations(
        self,
        session: AsyncSession,
        award_id: int,
        nominator_id: int,
        nominee_ids: Sequence[int] = (),
        groups: Sequence[NominationGroup] = (),
    ) -> Sequence[Nomination]:
        """Swap the nominator's committed set for a new one.

        Must run inside the caller's transaction so the delete and the insert
        commit together.
        """
        await session.execute(
            delete(Nomination).where(
                Nomination.award_id == award_id,
                Nomination.nominator_id == nominator_id,
            )
        )

        records = [
            Nomination(award_id=award_id, nominator_id=nominator_id, nominee_id=nominee_id)
            for nominee_id in nominee_ids
        ]
        for group in groups:
            group_id = uuid_lib.uuid4()
            records.extend(
                Nomination(
                    award_id=award_id,
                    nominator_id=nominator_id,
                    nominee_id=member_id,
                    nomination_group_id=group_id,
                )
                for member_id in group.members
            )
        session.add_all(records)
        await session.flush()
        return records

    async def _resolve_nominees(
        self,
        session: AsyncSession,
        award: Award,
        nominee_uuids: set[UUID],
    ) -> dict[UUID, UserModel]:
        nominees = await UserCrud.get_users_by_uuids(session, nominee_uuids)
        missing = nominee_uuids - set(nominees)
        if missing:
            raise ValidationError(f"Unknown nominee: {sorted(missing, key=str)[0]}")

        for nominee in nominees.values():
            if not is_eligible(award.nomination_criteria, nominee):
                raise ValidationError(f"{nominee.full_name} cannot be nominated for {award.name}")
        return nominees

    async def submit_nominations(
        self,
        session: AsyncSession,
        award: Award,
        caller: CallerIdentity,
        selection: Selection,
    ) -> bool:
        """Validate and store the caller's nominations for ``award``.

        Returns False when the selection matches what is already committed,
        in which case nothing is written.
        """
        await self.lock_nominator(session, caller.id)

        if award.is_duo:
            if any(isinstance(entry, (str, UUID)) for entry in selection):
                raise ValidationError("For this award, nominees must be in pairs")
            submitted = validate_pair_selection(selection, award.max_nominations, caller.uuid)
            nominees = await self._resolve_nominees(
                session, award, {member for group in submitted for member in group.members}
            )
            groups = [
                NominationGroup(group_id=None, members=tuple(nominees[m].id for m in group.members))
                for group in submitted
            ]

            existing = await self.get_nominations(session, award.id, caller.id)
            if existing and same_pair_selection(groups_from_records(existing), groups):
                logger.info(f"User {caller.id} resubmitted unchanged pairs for award {award.id}")
                return False

            await self.replace_nominations(session, award.id, caller.id, groups=groups)
            logger.info(f"User {caller.id} nominated {len(groups)} pairs for award {award.id}")
            return True

        if any(not isinstance(entry, (str, UUID)) for entry in selection):
            raise ValidationError("For this award, nominees must be individual people")
        submitted = validate_flat_selection(
            list(selection), award.max_nominations, caller.uuid, caller.partner_uuid
        )
        nominees = await self._resolve_nominees(session, award, set(submitted))
        nominee_ids = [nominees[nominee_uuid].id for nominee_uuid in submitted]

        existing = await self.get_nominations(session, award.id, caller.id)
        if existing and same_flat_selection((record.nominee_id for record in existing), nominee_ids):
            logger.info(f"User {caller.id} resubmitted unchanged nominations for award {award.id}")
            return False

        await self.replace_nominations(session, award.id, caller.id, nominee_ids=nominee_ids)
        logger.info(f"User {caller.id} nominated {len(nominee_ids)} people for award {award.id}")
        return True

    async def get_user_nominations(self, session: AsyncSession, user_id: int) -> list[dict]:
        """The user's committed nominations, one entry per award.

        Single nominations are listed under ``nominations``; duo pairs are
        rebuilt as ``NominationGroup``s of nominee uuids under ``groups``.
        """
        rows = await self.get_nominations_by_user(session, user_id)

        by_award: dict[UUID, dict] = {}
        for row in rows:
            entry = by_award.setdefault(
                row.award_uuid, {"award_uuid": row.award_uuid, "nominations": [], "pairs": {}}
            )
            if row.nomination_group_id is None:
                entry["nominations"].append(row.nominee_uuid)
            else:
                entry["pairs"].setdefault(row.nomination_group_id, []).append(row.nominee_uuid)

        result = []
        for entry in by_award.values():
            pairs = entry.pop("pairs")
            entry["groups"] = [
                NominationGroup.from_records(group_id, members) for group_id, members in pairs.items()
            ]
            result.append(entry)
        return result

    async def get_nomination_summary(self, session: AsyncSession, award_id: int) -> list[dict]:
        """Per nominee: how many nominations they got and from whom."""
        records = await self.get_award_nominations(session, award_id)
        users = await UserCrud.get_users_by_ids(
            session, {r.nominee_id for r in records} | {r.nominator_id for r in records}
        )

        summary: dict[int, dict] = {}
        for record in records:
            nominee = users.get(record.nominee_id)
            if nominee is None:
                continue
            entry = summary.setdefault(
                nominee.id, {"nominee": nominee, "nomination_count": 0, "nominators": []}
            )
            entry["nomination_count"] += 1
            nominator = users.get(record.nominator_id)
            if nominator is not None and nominator.full_name not in entry["nominators"]:
                entry["nominators"].append(nominator.full_name)

        return sorted(summary.values(), key=lambda e: (-e["nomination_count"], e["nominee"].id))


nomination_crud = NominationCrud()
