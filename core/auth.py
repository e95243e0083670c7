from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from fastapi.security import HTTPBearer
from jose import jwt, JWTError
from pydantic import BaseModel, ValidationError as PydanticValidationError

from core.exceptions import Unauthorized
from core.settings import settings

bearer_scheme = HTTPBearer(auto_error=False)


class CallerIdentity(BaseModel):
    """Verified identity of the user making a request.

    Built from the bearer token claims; ``id`` is filled in once the caller
    has been found in the user directory.
    """
    uuid: UUID
    email: Optional[str] = None
    user_group: Optional[str] = None
    gender: Optional[str] = None
    partner_uuid: Optional[UUID] = None
    is_partnered: bool = False
    id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.user_group == settings.ADMIN_GROUP


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def create_user_token(
    user_uuid: UUID,
    user_group: Optional[str] = None,
    gender: Optional[str] = None,
    partner_uuid: Optional[UUID] = None,
    is_partnered: bool = False,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Issue a token shaped like the ones the identity provider hands out."""
    claims: dict[str, Any] = {
        "sub": str(user_uuid),
        "email": email,
        "user_metadata": {
            "user_group": user_group,
            "gender": gender,
            "partner_id": str(partner_uuid) if partner_uuid else None,
            "is_partnered": is_partnered,
        },
    }
    return create_access_token(claims, expires_delta=expires_delta)


def decode_access_token(token: str) -> CallerIdentity:
    if not token or token.strip() == "":
        raise Unauthorized()

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized() from None

    user_uuid = payload.get("sub")
    if user_uuid is None:
        raise Unauthorized()

    metadata = payload.get("user_metadata") or {}
    try:
        return CallerIdentity(
            uuid=user_uuid,
            email=payload.get("email"),
            user_group=metadata.get("user_group"),
            gender=metadata.get("gender"),
            partner_uuid=metadata.get("partner_id"),
            is_partnered=bool(metadata.get("is_partnered")),
        )
    except PydanticValidationError:
        raise Unauthorized() from None
