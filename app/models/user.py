"""
User model - a family member who signed in with an external identity provider.

Users are never created directly: the OAuth callback resolves the provider
identity (e.g. Google's account ID) to a row here, creating it on first login.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.calendar_mux import CalendarMux


class User(Base):
    """
    SQLAlchemy ORM model for the 'users' table.

    The (auth_provider, auth_provider_id) pair identifies the external
    account and is unique; name and email are refreshed from the provider
    on every login.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_auth_provider_id", "auth_provider", "auth_provider_id", unique=True),
        CheckConstraint("auth_provider <> ''", name="ck_users_auth_provider_not_empty"),
        CheckConstraint("auth_provider_id <> ''", name="ck_users_auth_provider_id_not_empty"),
    )

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # Integer IDs: the frontend and the session token both carry them as numbers
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # ---------------------------------------------------------------------------
    # PROFILE INFORMATION (copied from the provider)
    # ---------------------------------------------------------------------------
    given_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    family_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # ---------------------------------------------------------------------------
    # EXTERNAL IDENTITY
    # ---------------------------------------------------------------------------
    # auth_provider: "google" (the only provider wired up today)
    auth_provider: Mapped[str] = mapped_column(String(50), nullable=False)

    # auth_provider_id: the provider's stable subject identifier
    auth_provider_id: Mapped[str] = mapped_column(String(255), nullable=False)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ---------------------------------------------------------------------------
    # RELATIONSHIPS
    # ---------------------------------------------------------------------------
    # calendar_muxes: muxes this user created; removed along with the user
    calendar_muxes: Mapped[list["CalendarMux"]] = relationship(
        "CalendarMux",
        back_populates="created_by",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, provider='{self.auth_provider}')>"
