"""Shared test helpers."""

from types import SimpleNamespace
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from core.auth import CallerIdentity, create_user_token
from core.base import Base
from core.depends import get_session
from core.phases import Phase
from crud.award_crud import award_crud as AwardCrud
from crud.user_crud import user_crud as UserCrud
from models import Award, UserModel


def fake_user(id: int, user_group: Optional[str] = None, gender: Optional[str] = None,
              is_partnered: bool = False, full_name: Optional[str] = None):
    """A directory user stand-in for the pure functions in ``core``."""
    return SimpleNamespace(
        id=id,
        uuid=f"uuid-{id}",
        full_name=full_name or f"User {id}",
        display_avatar_url=f"https://avatars.test/{id}.png",
        user_group=user_group,
        gender=gender,
        is_partnered=is_partnered,
    )


def fake_award(id: int = 1, phase: Phase = Phase.NOMINATION, active: bool = True,
               nomination_criteria=None, voting_criteria=None, finalist_count: int = 4):
    criteria = nomination_criteria or {}
    return SimpleNamespace(
        id=id,
        phase=phase.value,
        active=active,
        nomination_criteria=nomination_criteria,
        voting_criteria=voting_criteria,
        finalist_count=finalist_count,
        is_duo=bool(criteria.get("is_duo")),
    )


def fake_caller(user_group: Optional[str] = None, gender: Optional[str] = None,
                is_partnered: bool = False, is_admin: bool = False):
    return SimpleNamespace(
        user_group=user_group,
        gender=gender,
        is_partnered=is_partnered,
        is_admin=is_admin,
    )


async def make_user(session: AsyncSession, username: str, **fields) -> UserModel:
    data = {"username": username, "full_name": username.title()}
    data.update(fields)
    return await UserCrud.create_user(session, data)


async def make_award(session: AsyncSession, name: str = "Best Dancer", **fields) -> Award:
    data = {"name": name, "description": "", "max_nominations": 1, "finalist_count": 4}
    data.update(fields)
    return await AwardCrud.create_award(session, data)


def caller_for(user: UserModel, partner: Optional[UserModel] = None) -> CallerIdentity:
    return CallerIdentity(
        uuid=user.uuid,
        id=user.id,
        email=user.email,
        user_group=user.user_group,
        gender=user.gender,
        partner_uuid=partner.uuid if partner is not None else None,
        is_partnered=user.is_partnered,
    )


def auth_headers(user: UserModel, partner: Optional[UserModel] = None) -> dict[str, str]:
    token = create_user_token(
        user.uuid,
        user_group=user.user_group,
        gender=user.gender,
        partner_uuid=partner.uuid if partner is not None else None,
        is_partnered=user.is_partnered,
        email=user.email,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, autocommit=False, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    from main import app

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
