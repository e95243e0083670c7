from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from typing_extensions import TypeAlias

from core.async_engine import AsyncSessionLocal
from core.auth import CallerIdentity, bearer_scheme, decode_access_token
from core.exceptions import Forbidden, Unauthorized
from crud.user_crud import user_crud as UserCrud


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session

AsyncDBSession: TypeAlias = Annotated[AsyncSession, Depends(get_session)]


async def get_current_caller(
    session: AsyncDBSession,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> CallerIdentity:
    if credentials is None:
        raise Unauthorized()

    identity = decode_access_token(credentials.credentials)

    # The token must belong to someone in the user directory
    async with session.begin():
        user = await UserCrud.get_user_by_uuid(session, identity.uuid)

    if user is None:
        raise Unauthorized()

    return identity.model_copy(update={"id": user.id})

AuthenticatedCaller: TypeAlias = Annotated[CallerIdentity, Depends(get_current_caller)]


async def get_admin_caller(caller: AuthenticatedCaller) -> CallerIdentity:
    if not caller.is_admin:
        raise Forbidden("Forbidden: admins only")
    return caller

AdminCaller: TypeAlias = Annotated[CallerIdentity, Depends(get_admin_caller)]
