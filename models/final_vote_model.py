import uuid as uuid_lib
from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, ForeignKey, DateTime, Uuid, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from core.base import Base


class FinalVote(Base):
    __tablename__ = "final_votes"
    __table_args__ = (
        UniqueConstraint("award_id", "voter_id", name="uq_final_votes_award_voter"),
        CheckConstraint(
            "(nominee_id IS NULL) <> (nomination_group_id IS NULL)",
            name="ck_final_votes_single_target",
        ),
    )

    award_id: Mapped[int] = mapped_column(Integer, ForeignKey("awards.id"), nullable=False)
    voter_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False)
    nominee_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    nomination_group_id: Mapped[Optional[uuid_lib.UUID]] = mapped_column(Uuid, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )
