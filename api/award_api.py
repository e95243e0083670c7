import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter
from fastapi_pagination import Page, paginate
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.auth import CallerIdentity
from core.depends import AsyncDBSession, AuthenticatedCaller, AdminCaller
from core.exceptions import AwardsError, Forbidden, NotFound, StorageError
from core.phases import Action, Phase, ensure_allowed
from core.settings import settings
from core.visibility import can_nominate, can_vote, visible_awards
from crud.award_crud import award_crud as AwardCrud
from crud.candidate_crud import candidate_crud as CandidateCrud
from crud.final_vote_crud import final_vote_crud as FinalVoteCrud
from crud.nomination_crud import nomination_crud as NominationCrud
from crud.results_crud import results_crud as ResultsCrud
from models import Award
from schemas.award_schema import (
    AwardSchema,
    AwardWithStatusSchema,
    CreateAwardRequestSchema,
    UpdateAwardRequestSchema,
    ToggleActiveRequestSchema,
)
from schemas.user_schema import UserSchema
from schemas.vote_schema import (
    AwardNominationSummarySchema,
    AwardResultSchema,
    CandidateSchema,
    FinalVoteRequestSchema,
    NominationRequestSchema,
    SubmissionResponseSchema,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/awards",
)


async def get_award_or_404(session: AsyncSession, award_uuid: UUID, caller: CallerIdentity) -> Award:
    award = await AwardCrud.get_award_by_uuid(session, award_uuid)
    # Inactive awards don't exist as far as non-admins are concerned
    if award is None or (not award.active and not caller.is_admin):
        raise NotFound("Award not found")
    return award


@router.get("/", response_model=List[AwardWithStatusSchema])
async def list_visible_awards(
    session: AsyncDBSession,
    current_user: AuthenticatedCaller,
):
    try:
        async with session.begin():
            awards = await AwardCrud.get_all_awards(session)
            nominated = await NominationCrud.get_nominated_award_ids(session, current_user.id)
            voted = await FinalVoteCrud.get_voted_award_ids(session, current_user.id)

        return [
            AwardWithStatusSchema(
                **AwardSchema.model_validate(view.award).model_dump(),
                has_nominated=view.has_nominated,
                has_voted=view.has_voted,
            )
            for view in visible_awards(awards, current_user, nominated, voted)
        ]

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        logger.exception("Failed to fetch awards")
        raise StorageError("Failed to fetch awards") from e


@router.get("/all", response_model=List[AwardSchema])
async def list_all_awards(
    session: AsyncDBSession,
    current_user: AdminCaller,
):
    try:
        async with session.begin():
            awards = await AwardCrud.get_all_awards(session)
        return [AwardSchema.model_validate(award) for award in awards]

    except SQLAlchemyError as e:
        logger.exception("Failed to fetch all awards")
        raise StorageError("Failed to fetch awards") from e


@router.post("/", response_model=AwardSchema, status_code=201)
async def create_award(
    session: AsyncDBSession,
    award: CreateAwardRequestSchema,
    current_user: AdminCaller,
):
    try:
        async with session.begin():
            award_data = award.model_dump()
            if award_data["finalist_count"] is None:
                award_data["finalist_count"] = settings.DEFAULT_FINALIST_COUNT
            created_award = await AwardCrud.create_award(session, award_data)
            response = AwardSchema.model_validate(created_award)

        logger.info(f"Admin {current_user.id} created award {created_award.id} ({created_award.name})")
        return response

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Failed to create award")
        raise StorageError("Failed to create award") from e


@router.put("/{award_uuid}", response_model=AwardSchema)
async def update_award(
    session: AsyncDBSession,
    award_uuid: UUID,
    award: UpdateAwardRequestSchema,
    current_user: AdminCaller,
):
    try:
        async with session.begin():
            existing_award = await get_award_or_404(session, award_uuid, current_user)

            changes = award.model_dump(exclude_unset=True)
            for field in ("name", "description", "max_nominations", "finalist_count", "display_order"):
                # These columns are not nullable
                if field in changes and changes[field] is None:
                    changes.pop(field)

            if changes:
                existing_award = await AwardCrud.update_award(session, existing_award.id, changes)
            response = AwardSchema.model_validate(existing_award)

        return response

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Failed to update award {award_uuid}")
        raise StorageError("Failed to update award") from e


@router.get("/{award_uuid}/candidates", response_model=List[CandidateSchema])
async def get_candidates(
    session: AsyncDBSession,
    award_uuid: UUID,
    current_user: AuthenticatedCaller,
):
    """Nominable users during NOMINATION, finalists during FINAL_VOTING, nothing afterwards."""
    try:
        async with session.begin():
            award = await get_award_or_404(session, award_uuid, current_user)

            phase = Phase(award.phase)
            if not current_user.is_admin:
                if phase == Phase.NOMINATION and not (can_nominate(award, current_user) or can_vote(award, current_user)):
                    raise Forbidden("You are not eligible to take part in this award")
                if phase == Phase.FINAL_VOTING and not can_vote(award, current_user):
                    raise Forbidden("You are not eligible to vote in this award")

            candidates = await CandidateCrud.get_candidates(session, award)

        return [
            CandidateSchema(
                is_duo=candidate.is_duo,
                user=UserSchema.from_user(candidate.user) if candidate.user is not None else None,
                nomination_group_id=candidate.group_id,
                duo_members=[UserSchema.from_user(member) for member in candidate.members],
            )
            for candidate in candidates
        ]

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        logger.exception(f"Failed to fetch candidates for award {award_uuid}")
        raise StorageError("Failed to fetch candidates") from e


@router.post("/{award_uuid}/nominations", response_model=SubmissionResponseSchema)
async def submit_nominations(
    session: AsyncDBSession,
    award_uuid: UUID,
    nomination_data: NominationRequestSchema,
    current_user: AuthenticatedCaller,
):
    try:
        async with session.begin():
            award = await get_award_or_404(session, award_uuid, current_user)
            ensure_allowed(award.phase, Action.NOMINATE)
            if not can_nominate(award, current_user):
                raise Forbidden("You are not eligible to nominate for this award")

            changed = await NominationCrud.submit_nominations(
                session, award, current_user, nomination_data.nominee_ids
            )

        return SubmissionResponseSchema(
            message="Nominations submitted successfully" if changed else "Nominations unchanged",
            award_id=award_uuid,
            changed=changed,
        )

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Failed to submit nominations for award {award_uuid}")
        raise StorageError("Failed to submit nominations") from e


@router.get("/{award_uuid}/nominations", response_model=Page[AwardNominationSummarySchema])
async def get_award_nominations(
    session: AsyncDBSession,
    award_uuid: UUID,
    current_user: AdminCaller,
):
    """Admin view of who was nominated for an award and by whom."""
    try:
        async with session.begin():
            award = await get_award_or_404(session, award_uuid, current_user)
            summary = await NominationCrud.get_nomination_summary(session, award.id)

        return paginate([
            AwardNominationSummarySchema(
                nominee=UserSchema.from_user(entry["nominee"]),
                nomination_count=entry["nomination_count"],
                nominators=", ".join(entry["nominators"]),
            )
            for entry in summary
        ])

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        logger.exception(f"Failed to fetch nominations for award {award_uuid}")
        raise StorageError("Failed to fetch nominations") from e


@router.post("/{award_uuid}/final-vote", response_model=SubmissionResponseSchema)
async def submit_final_vote(
    session: AsyncDBSession,
    award_uuid: UUID,
    vote_data: FinalVoteRequestSchema,
    current_user: AuthenticatedCaller,
):
    try:
        async with session.begin():
            award = await get_award_or_404(session, award_uuid, current_user)
            ensure_allowed(award.phase, Action.VOTE)
            if not can_vote(award, current_user):
                raise Forbidden("You are not eligible to vote in this award")

            await FinalVoteCrud.submit_final_vote(
                session,
                award,
                current_user,
                nominee_uuid=vote_data.nominee_id,
                nomination_group_id=vote_data.nomination_group_id,
            )

        return SubmissionResponseSchema(message="Vote recorded successfully", award_id=award_uuid)

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Failed to record final vote for award {award_uuid}")
        raise StorageError("Failed to record vote") from e


@router.get("/{award_uuid}/results", response_model=List[AwardResultSchema])
async def get_results(
    session: AsyncDBSession,
    award_uuid: UUID,
    current_user: AuthenticatedCaller,
):
    try:
        async with session.begin():
            award = await get_award_or_404(session, award_uuid, current_user)
            if not current_user.is_admin:
                ensure_allowed(award.phase, Action.VIEW_RESULTS)

            results = await ResultsCrud.compute_results(session, award)

        return [AwardResultSchema.model_validate(row) for row in results]

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        logger.exception(f"Failed to compute results for award {award_uuid}")
        raise StorageError("Failed to fetch results") from e


@router.post("/{award_uuid}/active", response_model=AwardSchema)
async def toggle_award_active(
    session: AsyncDBSession,
    award_uuid: UUID,
    toggle_data: ToggleActiveRequestSchema,
    current_user: AdminCaller,
):
    try:
        async with session.begin():
            award = await get_award_or_404(session, award_uuid, current_user)
            updated_award = await AwardCrud.set_active(session, award.id, toggle_data.active)
            response = AwardSchema.model_validate(updated_award)

        logger.info(f"Admin {current_user.id} set active={toggle_data.active} on award {award.id}")
        return response

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Failed to toggle award {award_uuid}")
        raise StorageError("Failed to update award") from e


async def _transition(
    session: AsyncSession,
    award_uuid: UUID,
    current_user: CallerIdentity,
    from_phase: Optional[Phase] = None,
    to_phase: Optional[Phase] = None,
) -> AwardSchema:
    try:
        async with session.begin():
            award = await get_award_or_404(session, award_uuid, current_user)
            if from_phase is None:
                await AwardCrud.advance_phase(session, award)
            else:
                await AwardCrud.transition_phase(session, award.id, from_phase, to_phase)
            # Guarded updates that match nothing leave the award as it was
            await session.refresh(award)
            response = AwardSchema.model_validate(award)

        return response

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Failed to change phase of award {award_uuid}")
        raise StorageError("Failed to update award phase") from e


@router.post("/{award_uuid}/end-nomination", response_model=AwardSchema)
async def end_nomination_phase(
    session: AsyncDBSession,
    award_uuid: UUID,
    current_user: AdminCaller,
):
    return await _transition(session, award_uuid, current_user, Phase.NOMINATION, Phase.FINAL_VOTING)


@router.post("/{award_uuid}/end-voting", response_model=AwardSchema)
async def end_voting_phase(
    session: AsyncDBSession,
    award_uuid: UUID,
    current_user: AdminCaller,
):
    return await _transition(session, award_uuid, current_user, Phase.FINAL_VOTING, Phase.RESULTS)


@router.post("/{award_uuid}/advance", response_model=AwardSchema)
async def advance_phase(
    session: AsyncDBSession,
    award_uuid: UUID,
    current_user: AdminCaller,
):
    return await _transition(session, award_uuid, current_user)
