"""
Calendar Mux Service - create, list and delete a user's calendar muxes.

Every query is scoped to the owner: a mux created by someone else behaves
exactly like one that doesn't exist.
"""

import logging

from sqlalchemy.orm import Session

from app.models.calendar_mux import CalendarMux


logger = logging.getLogger("family_calendar.services.calendar_mux")


class CalendarMuxNotFoundError(Exception):
    """No mux with that ID belongs to the requesting user."""

    def __init__(self, mux_id: int):
        self.mux_id = mux_id
        super().__init__(f"Calendar mux {mux_id} not found or access denied")


def create_calendar_mux(
    db: Session,
    created_by_id: int,
    name: str,
    description: str = "",
) -> CalendarMux:
    """Insert a new mux owned by created_by_id and return it."""
    mux = CalendarMux(
        created_by_id=created_by_id,
        name=name,
        description=description,
    )
    db.add(mux)
    db.commit()
    db.refresh(mux)

    logger.info(f"Created calendar mux {mux.id} for user {created_by_id}")
    return mux


def list_calendar_muxes(db: Session, created_by_id: int) -> list[CalendarMux]:
    """All muxes owned by the user, oldest first."""
    return (
        db.query(CalendarMux)
        .filter(CalendarMux.created_by_id == created_by_id)
        .order_by(CalendarMux.id)
        .all()
    )


def delete_calendar_mux(db: Session, mux_id: int, created_by_id: int) -> None:
    """
    Delete one of the user's muxes.

    Raises:
        CalendarMuxNotFoundError: no row matched both the ID and the owner
    """
    deleted = (
        db.query(CalendarMux)
        .filter(
            CalendarMux.id == mux_id,
            CalendarMux.created_by_id == created_by_id,
        )
        .delete(synchronize_session=False)
    )

    if deleted == 0:
        db.rollback()
        raise CalendarMuxNotFoundError(mux_id)

    db.commit()
    logger.info(f"Deleted calendar mux {mux_id} for user {created_by_id}")
