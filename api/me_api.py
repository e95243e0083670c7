import logging
from typing import List

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from core.depends import AsyncDBSession, AuthenticatedCaller
from core.exceptions import AwardsError, NotFound, StorageError
from crud.final_vote_crud import final_vote_crud as FinalVoteCrud
from crud.nomination_crud import nomination_crud as NominationCrud
from crud.user_crud import user_crud as UserCrud
from schemas.user_schema import UserSchema
from schemas.vote_schema import NominationPairSchema, UserFinalVoteSchema, UserNominationsSchema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/me",
)


@router.get("/", response_model=UserSchema)
async def get_me(
    session: AsyncDBSession,
    current_user: AuthenticatedCaller,
):
    try:
        async with session.begin():
            user = await UserCrud.get_user_by_id(session, current_user.id)
        if user is None:
            raise NotFound("User not found")
        return UserSchema.from_user(user)

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        logger.exception(f"Failed to fetch user {current_user.id}")
        raise StorageError("Failed to fetch your profile") from e


@router.get("/nominations", response_model=List[UserNominationsSchema])
async def get_my_nominations(
    session: AsyncDBSession,
    current_user: AuthenticatedCaller,
):
    try:
        async with session.begin():
            entries = await NominationCrud.get_user_nominations(session, current_user.id)

        return [
            UserNominationsSchema(
                award_id=entry["award_uuid"],
                nominations=entry["nominations"],
                pairs=[
                    NominationPairSchema(nomination_group_id=group.group_id, nominee_ids=list(group.members))
                    for group in entry["groups"]
                ],
            )
            for entry in entries
        ]

    except SQLAlchemyError as e:
        logger.exception(f"Failed to fetch nominations of user {current_user.id}")
        raise StorageError("Failed to fetch your nominations") from e


@router.get("/final-votes", response_model=List[UserFinalVoteSchema])
async def get_my_final_votes(
    session: AsyncDBSession,
    current_user: AuthenticatedCaller,
):
    try:
        async with session.begin():
            rows = await FinalVoteCrud.get_user_final_votes(session, current_user.id)

        return [
            UserFinalVoteSchema(
                award_id=row.award_uuid,
                nominee_id=row.nominee_uuid,
                nomination_group_id=row.nomination_group_id,
            )
            for row in rows
        ]

    except SQLAlchemyError as e:
        logger.exception(f"Failed to fetch final votes of user {current_user.id}")
        raise StorageError("Failed to fetch your votes") from e
