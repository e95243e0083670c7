import logging
from typing import Optional, Sequence, Any
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import CallerIdentity
from core.exceptions import ValidationError
from crud.candidate_crud import candidate_crud as CandidateCrud
from crud.nomination_crud import nomination_crud as NominationCrud
from models import Award, FinalVote, UserModel

logger = logging.getLogger(__name__)


def _dialect_insert(session: AsyncSession):
    if session.bind.dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


class FinalVoteCrud:

    def __init__(self):
        self.table = FinalVote

    async def upsert_vote(
        self,
        session: AsyncSession,
        award_id: int,
        voter_id: int,
        nominee_id: Optional[int] = None,
        nomination_group_id: Optional[UUID] = None,
    ) -> None:
        """Insert or overwrite the single final vote of ``voter_id`` for ``award_id``."""
        insert = _dialect_insert(session)
        stmt = insert(FinalVote).values(
            award_id=award_id,
            voter_id=voter_id,
            nominee_id=nominee_id,
            nomination_group_id=nomination_group_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[FinalVote.award_id, FinalVote.voter_id],
            set_={
                "nominee_id": stmt.excluded.nominee_id,
                "nomination_group_id": stmt.excluded.nomination_group_id,
                "updated_at": func.now(),
            },
        )
        await session.execute(stmt)

    async def get_vote(self, session: AsyncSession, award_id: int, voter_id: int) -> Optional[FinalVote]:
        stmt = select(FinalVote).where(FinalVote.award_id == award_id, FinalVote.voter_id == voter_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_votes_by_award(self, session: AsyncSession, award_id: int) -> Sequence[FinalVote]:
        stmt = select(FinalVote).where(FinalVote.award_id == award_id).order_by(FinalVote.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_voted_award_ids(self, session: AsyncSession, user_id: int) -> set[int]:
        stmt = select(FinalVote.award_id).where(FinalVote.voter_id == user_id)
        result = await session.execute(stmt)
        return {row[0] for row in result.fetchall()}

    async def get_user_final_votes(self, session: AsyncSession, user_id: int) -> Sequence[Any]:
        stmt = (
            select(
                Award.uuid.label("award_uuid"),
                UserModel.uuid.label("nominee_uuid"),
                FinalVote.nomination_group_id,
            )
            .select_from(FinalVote)
            .join(Award, FinalVote.award_id == Award.id)
            .outerjoin(UserModel, FinalVote.nominee_id == UserModel.id)
            .where(FinalVote.voter_id == user_id)
            .order_by(Award.display_order, Award.id)
        )
        result = await session.execute(stmt)
        return result.fetchall()

    async def submit_final_vote(
        self,
        session: AsyncSession,
        award: Award,
        caller: CallerIdentity,
        nominee_uuid: Optional[UUID] = None,
        nomination_group_id: Optional[UUID] = None,
    ) -> None:
        """Record the caller's vote for one of the award's finalists."""
        finalists = await CandidateCrud.get_candidates(session, award)

        if award.is_duo:
            if nomination_group_id is None:
                raise ValidationError("For this award, vote for a pair using its nomination_group_id")
            members = (await NominationCrud.get_group_members(session, award.id)).get(nomination_group_id)
            finalist_pairs = {frozenset(m.id for m in c.members) for c in finalists if c.is_duo}
            if members is None or frozenset(members) not in finalist_pairs:
                raise ValidationError("The selected pair is not a finalist for this award")
            await self.upsert_vote(session, award.id, caller.id, nomination_group_id=nomination_group_id)
            logger.info(f"User {caller.id} voted for pair {nomination_group_id} in award {award.id}")
            return

        if nominee_uuid is None:
            raise ValidationError("For this award, vote for a single nominee")
        finalist = next(
            (c.user for c in finalists if c.user is not None and c.user.uuid == nominee_uuid), None
        )
        if finalist is None:
            raise ValidationError("The selected nominee is not a finalist for this award")
        await self.upsert_vote(session, award.id, caller.id, nominee_id=finalist.id)
        logger.info(f"User {caller.id} voted for user {finalist.id} in award {award.id}")


final_vote_crud = FinalVoteCrud()
