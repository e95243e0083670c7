import logging
from typing import List

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from core.depends import AsyncDBSession, AdminCaller
from core.exceptions import AwardsError, StorageError
from crud.award_crud import award_crud as AwardCrud
from schemas.award_schema import AwardSchema, BulkPhaseRequestSchema, MessageResponseSchema

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
)


@router.post("/phase", response_model=List[AwardSchema])
async def bulk_advance_phase(
    session: AsyncDBSession,
    phase_data: BulkPhaseRequestSchema,
    current_user: AdminCaller,
):
    """Move every award in ``from_phase`` straight to ``to_phase``.

    Unlike the per-award transitions this may skip or repeat phases.
    """
    try:
        async with session.begin():
            updated = await AwardCrud.bulk_update_phase(session, phase_data.from_phase, phase_data.to_phase)
            response = [AwardSchema.model_validate(award) for award in updated]

        logger.info(
            f"Admin {current_user.id} moved {len(response)} awards "
            f"from {phase_data.from_phase.value} to {phase_data.to_phase.value}"
        )
        return response

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Failed to bulk update award phases")
        raise StorageError("Failed to update award phases") from e


@router.post("/reset", response_model=MessageResponseSchema)
async def reset_awards(
    session: AsyncDBSession,
    current_user: AdminCaller,
):
    try:
        async with session.begin():
            await AwardCrud.reset_awards(session)

        logger.info(f"Admin {current_user.id} reset all awards")
        return MessageResponseSchema(message="All nominations and votes cleared; awards reopened for nomination")

    except AwardsError:
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("Failed to reset awards")
        raise StorageError("Failed to reset awards") from e


async def _set_all_active(session, active: bool) -> MessageResponseSchema:
    try:
        async with session.begin():
            count = await AwardCrud.set_all_active(session, active)

        state = "activated" if active else "deactivated"
        return MessageResponseSchema(message=f"{count} awards {state}")

    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception(f"Failed to set active={active} on all awards")
        raise StorageError("Failed to update awards") from e


@router.post("/activate-all", response_model=MessageResponseSchema)
async def activate_all_awards(
    session: AsyncDBSession,
    current_user: AdminCaller,
):
    return await _set_all_active(session, True)


@router.post("/deactivate-all", response_model=MessageResponseSchema)
async def deactivate_all_awards(
    session: AsyncDBSession,
    current_user: AdminCaller,
):
    return await _set_all_active(session, False)
