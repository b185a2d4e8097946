"""
Calendar mux model - a named grouping of calendars owned by one user.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.user import User


class CalendarMux(Base):
    """
    SQLAlchemy ORM model for the 'calendar_muxes' table.

    Only the creator can see or delete a mux; every query in
    calendar_mux_service filters on created_by_id.
    """

    __tablename__ = "calendar_muxes"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # created_by_id: owner; CASCADE removes the muxes when the user is deleted
    created_by_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(String(1000), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    created_by: Mapped["User"] = relationship("User", back_populates="calendar_muxes")

    def __repr__(self) -> str:
        return f"<CalendarMux(id={self.id}, created_by_id={self.created_by_id}, name='{self.name}')>"
