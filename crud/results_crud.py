from sqlalchemy.ext.asyncio import AsyncSession

from core.phases import Phase
from core.results import AwardResultRow, build_result_rows, rank, tally_final_votes, tally_nominations
from crud.final_vote_crud import final_vote_crud as FinalVoteCrud
from crud.nomination_crud import nomination_crud as NominationCrud
from crud.user_crud import user_crud as UserCrud
from models import Award


class ResultsCrud:

    async def compute_results(self, session: AsyncSession, award: Award) -> list[AwardResultRow]:
        """Ranked tally for ``award``.

        Nominations are counted while the award is in NOMINATION; final votes
        from FINAL_VOTING onwards.
        """
        if Phase(award.phase) == Phase.NOMINATION:
            records = await NominationCrud.get_award_nominations(session, award.id)
            tally = tally_nominations(record.nominee_id for record in records)
        else:
            votes = await FinalVoteCrud.get_votes_by_award(session, award.id)
            group_members = {}
            if any(vote.nomination_group_id is not None for vote in votes):
                group_members = await NominationCrud.get_group_members(session, award.id)
            tally = tally_final_votes(
                ((vote.nominee_id, vote.nomination_group_id) for vote in votes),
                group_members,
            )

        ranked = rank(tally)
        users = await UserCrud.get_users_by_ids(session, (nominee_id for nominee_id, _ in ranked))
        return build_result_rows(ranked, users)


results_crud = ResultsCrud()
