from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.candidates import Candidate, resolve_candidates
from core.phases import Phase
from core.selection import groups_from_records
from crud.nomination_crud import nomination_crud as NominationCrud
from crud.user_crud import user_crud as UserCrud
from models import Award


class CandidateCrud:

    async def get_candidates(
        self,
        session: AsyncSession,
        award: Award,
        phase: Optional[Phase] = None,
    ) -> list[Candidate]:
        phase = Phase(phase or award.phase)
        if phase not in (Phase.NOMINATION, Phase.FINAL_VOTING):
            return []

        users = await UserCrud.get_all_users(session)
        if phase == Phase.NOMINATION:
            return resolve_candidates(award, phase, users)

        records = await NominationCrud.get_award_nominations(session, award.id)
        return resolve_candidates(
            award,
            phase,
            users,
            nominee_ids=[record.nominee_id for record in records],
            groups=groups_from_records(records),
        )


candidate_crud = CandidateCrud()
