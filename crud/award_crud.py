import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import insert, update, select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from core.phases import Phase, next_phase
from models import Award, Nomination, FinalVote

logger = logging.getLogger(__name__)


class AwardCrud:
    def __init__(self):
        self.table = Award

    async def create_award(self, session: AsyncSession, award_data: dict) -> Award:
        stmt = insert(Award).values(**award_data).returning(Award)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_award_by_uuid(self, session: AsyncSession, award_uuid: UUID) -> Optional[Award]:
        stmt = select(Award).where(Award.uuid == award_uuid)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_all_awards(self, session: AsyncSession) -> Sequence[Award]:
        stmt = select(Award).order_by(Award.display_order, Award.id)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def update_award(self, session: AsyncSession, award_id: int, award_data: dict) -> Award:
        stmt = update(Award).where(Award.id == award_id).values(**award_data).returning(Award)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def set_active(self, session: AsyncSession, award_id: int, active: bool) -> Award:
        return await self.update_award(session, award_id, {"active": active})

    async def set_all_active(self, session: AsyncSession, active: bool) -> int:
        """Activate or deactivate every award, touching only rows that change."""
        stmt = update(Award).where(Award.active != active).values(active=active)
        result = await session.execute(stmt)
        logger.info(f"Set active={active} on {result.rowcount} awards")
        return result.rowcount

    async def transition_phase(
        self,
        session: AsyncSession,
        award_id: int,
        from_phase: Phase,
        to_phase: Phase,
    ) -> Optional[Award]:
        """Move one award from ``from_phase`` to ``to_phase``.

        The update only applies while the award is still in ``from_phase``;
        returns None when nothing matched.
        """
        stmt = (
            update(Award)
            .where(Award.id == award_id, Award.phase == from_phase.value)
            .values(phase=to_phase.value)
            .returning(Award)
        )
        result = await session.execute(stmt)
        updated = result.scalars().first()
        if updated is not None:
            logger.info(f"Award {award_id} moved from {from_phase.value} to {to_phase.value}")
        return updated

    async def advance_phase(self, session: AsyncSession, award: Award) -> Optional[Award]:
        current = Phase(award.phase)
        return await self.transition_phase(session, award.id, current, next_phase(current))

    async def bulk_update_phase(self, session: AsyncSession, from_phase: Phase, to_phase: Phase) -> Sequence[Award]:
        stmt = (
            update(Award)
            .where(Award.phase == from_phase.value)
            .values(phase=to_phase.value)
            .returning(Award)
        )
        result = await session.execute(stmt)
        updated = sorted(result.scalars().all(), key=lambda award: (award.display_order, award.id))
        logger.info(f"Moved {len(updated)} awards from {from_phase.value} to {to_phase.value}")
        return updated

    async def reset_awards(self, session: AsyncSession) -> None:
        """Clear every nomination and final vote and reopen every award for nominations."""
        votes = await session.execute(delete(FinalVote))
        nominations = await session.execute(delete(Nomination))
        await session.execute(update(Award).values(phase=Phase.NOMINATION.value))
        logger.info(
            f"Reset awards: removed {nominations.rowcount} nominations and {votes.rowcount} final votes"
        )


award_crud = AwardCrud()
