"""Tests for award phase transitions and admin bulk operations."""

import pytest
from sqlalchemy import func, select

from core.exceptions import ValidationError
from core.phases import Phase
from crud.award_crud import award_crud as AwardCrud
from crud.final_vote_crud import final_vote_crud as FinalVoteCrud
from crud.nomination_crud import nomination_crud as NominationCrud
from models import FinalVote, Nomination
from tests.conftest import make_award, make_user


async def _count(session, model):
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestTransitions:
    async def test_end_nomination(self, session):
        award = await make_award(session)

        updated = await AwardCrud.transition_phase(session, award.id, Phase.NOMINATION, Phase.FINAL_VOTING)

        assert updated.phase == Phase.FINAL_VOTING.value

    async def test_guarded_transition_from_wrong_phase_has_no_effect(self, session):
        award = await make_award(session, phase=Phase.FINAL_VOTING.value)

        updated = await AwardCrud.transition_phase(session, award.id, Phase.NOMINATION, Phase.FINAL_VOTING)

        assert updated is None
        refreshed = await AwardCrud.get_award_by_uuid(session, award.uuid)
        assert refreshed.phase == Phase.FINAL_VOTING.value

    async def test_advance_one_step(self, session):
        award = await make_award(session, phase=Phase.RESULTS.value)

        updated = await AwardCrud.advance_phase(session, award)

        assert updated.phase == Phase.CLOSED.value

    async def test_advance_closed_is_rejected(self, session):
        award = await make_award(session, phase=Phase.CLOSED.value)

        with pytest.raises(ValidationError):
            await AwardCrud.advance_phase(session, award)

    async def test_transitions_keep_records(self, session):
        award = await make_award(session)
        n = await make_user(session, "nia")
        x = await make_user(session, "xavi")
        await NominationCrud.replace_nominations(session, award.id, n.id, nominee_ids=[x.id])

        await AwardCrud.transition_phase(session, award.id, Phase.NOMINATION, Phase.FINAL_VOTING)

        assert await _count(session, Nomination) == 1


class TestBulkOperations:
    async def test_bulk_phase_moves_matching_awards(self, session):
        first = await make_award(session, "First", display_order=2)
        second = await make_award(session, "Second", display_order=1)
        await make_award(session, "Third", phase=Phase.RESULTS.value)

        updated = await AwardCrud.bulk_update_phase(session, Phase.NOMINATION, Phase.RESULTS)

        assert [a.id for a in updated] == [second.id, first.id]
        assert all(a.phase == Phase.RESULTS.value for a in updated)

    async def test_bulk_phase_over_zero_rows(self, session):
        await make_award(session)

        assert await AwardCrud.bulk_update_phase(session, Phase.CLOSED, Phase.NOMINATION) == []

    async def test_set_all_active(self, session):
        await make_award(session, "First", active=True)
        await make_award(session, "Second", active=False)

        assert await AwardCrud.set_all_active(session, False) == 1
        assert all(not a.active for a in await AwardCrud.get_all_awards(session))

    async def test_reset_awards(self, session):
        a = await make_award(session, "A", phase=Phase.FINAL_VOTING.value)
        b = await make_award(session, "B", phase=Phase.CLOSED.value)
        n = await make_user(session, "nia")
        x = await make_user(session, "xavi")
        await NominationCrud.replace_nominations(session, a.id, n.id, nominee_ids=[x.id])
        await NominationCrud.replace_nominations(session, b.id, n.id, nominee_ids=[x.id])
        await FinalVoteCrud.upsert_vote(session, a.id, n.id, nominee_id=x.id)

        await AwardCrud.reset_awards(session)

        assert await _count(session, Nomination) == 0
        assert await _count(session, FinalVote) == 0
        assert {award.phase for award in await AwardCrud.get_all_awards(session)} == {Phase.NOMINATION.value}
