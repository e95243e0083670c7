import uuid as uuid_lib
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, ForeignKey, DateTime, Uuid, Index, func
from sqlalchemy.orm import Mapped, mapped_column

from core.base import Base


class Nomination(Base):
    __tablename__ = "nominations"
    __table_args__ = (
        Index("ix_nominations_award_nominator", "award_id", "nominator_id"),
    )

    award_id: Mapped[int] = mapped_column(Integer, ForeignKey("awards.id"), nullable=False)
    nominator_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    nominee_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    # Shared by the two rows of one duo pair, null for single nominations
    nomination_group_id: Mapped[Optional[uuid_lib.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
