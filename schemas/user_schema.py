from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from models import UserModel


class UserSchema(BaseModel):
    uuid: UUID
    username: str
    full_name: str
    avatar_url: str
    user_group: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def from_user(cls, user: UserModel) -> "UserSchema":
        return cls(
            uuid=user.uuid,
            username=user.username,
            full_name=user.full_name,
            avatar_url=user.display_avatar_url,
            user_group=user.user_group,
        )
