from datetime import datetime
from typing import Any, Optional

from sqlalchemy import String, Integer, Boolean, DateTime, JSON, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from core.base import Base
from core.phases import Phase
from core.settings import settings

CriteriaJSON = JSON().with_variant(JSONB(), "postgresql")


class Award(Base):
    __tablename__ = "awards"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    phase: Mapped[str] = mapped_column(String(20), default=Phase.NOMINATION.value, nullable=False)
    max_nominations: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    finalist_count: Mapped[int] = mapped_column(
        Integer, default=settings.DEFAULT_FINALIST_COUNT, nullable=False
    )
    nomination_criteria: Mapped[Optional[dict[str, Any]]] = mapped_column(CriteriaJSON, nullable=True)
    voting_criteria: Mapped[Optional[dict[str, Any]]] = mapped_column(CriteriaJSON, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)

    @property
    def is_duo(self) -> bool:
        return bool((self.nomination_criteria or {}).get("is_duo"))
