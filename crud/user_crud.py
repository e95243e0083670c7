from typing import Iterable, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.user_model import UserModel


class UserCrud:

    def __init__(self):
        self.table = UserModel

    async def create_user(self, session: AsyncSession, user_data: dict) -> UserModel:
        user = UserModel(**user_data)
        session.add(user)
        await session.flush()
        await session.refresh(user)
        return user

    async def get_user_by_id(self, session: AsyncSession, user_id: int) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_user_by_uuid(self, session: AsyncSession, user_uuid) -> Optional[UserModel]:
        stmt = select(UserModel).where(UserModel.uuid == user_uuid)
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_users_by_uuids(self, session: AsyncSession, user_uuids: Iterable[UUID]) -> dict[UUID, UserModel]:
        user_uuids = set(user_uuids)
        if not user_uuids:
            return {}
        stmt = select(UserModel).where(UserModel.uuid.in_(user_uuids))
        result = await session.execute(stmt)
        return {user.uuid: user for user in result.scalars().all()}

    async def get_users_by_ids(self, session: AsyncSession, user_ids: Iterable[int]) -> dict[int, UserModel]:
        user_ids = set(user_ids)
        if not user_ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(user_ids))
        result = await session.execute(stmt)
        return {user.id: user for user in result.scalars().all()}

    async def get_all_users(self, session: AsyncSession) -> Sequence[UserModel]:
        """The user directory in directory order."""
        stmt = select(UserModel).order_by(UserModel.id)
        result = await session.execute(stmt)
        return result.scalars().all()


user_crud = UserCrud()
