"""
Calendar mux router - CRUD for the signed-in user's calendar muxes.

Endpoints:
- GET    /api/calendar-mux       → List the user's muxes
- POST   /api/calendar-mux       → Create a mux
- DELETE /api/calendar-mux/{id}  → Delete one of the user's muxes

All endpoints require authentication. A mux owned by another user is
reported exactly like a missing one.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.deps import get_current_user_id
from app.schemas.calendar_mux import (
    CalendarMuxCreate,
    CalendarMuxDeleted,
    CalendarMuxList,
    CalendarMuxOut,
)
from app.services import calendar_mux_service
from app.services.calendar_mux_service import CalendarMuxNotFoundError


logger = logging.getLogger("family_calendar.routers.calendar_mux")

# Largest ID accepted in the path (IDs are unsigned 32-bit)
MAX_MUX_ID = 2**32 - 1

# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/api/calendar-mux", tags=["calendar-mux"])


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------

def parse_mux_id(raw_id: str) -> int:
    """
    Parse the {id} path segment.

    Raises:
        400: not a non-negative integer in range
    """
    if not raw_id.isascii() or not raw_id.isdigit() or int(raw_id) > MAX_MUX_ID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid calendar mux ID",
        )
    return int(raw_id)


# ---------------------------------------------------------------------------
# LIST
# ---------------------------------------------------------------------------

@router.get("", response_model=CalendarMuxList)
def list_calendar_muxes(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """List the user's calendar muxes, oldest first."""
    try:
        muxes = calendar_mux_service.list_calendar_muxes(db, user_id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to list calendar muxes for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve calendar muxes",
        )

    return CalendarMuxList(
        calendar_muxes=[CalendarMuxOut.model_validate(mux) for mux in muxes]
    )


# ---------------------------------------------------------------------------
# CREATE
# ---------------------------------------------------------------------------

@router.post("", response_model=CalendarMuxOut, status_code=status.HTTP_201_CREATED)
def create_calendar_mux(
    payload: CalendarMuxCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """
    Create a calendar mux owned by the current user.

    Example request body:
    {
        "name": "Family",
        "description": "Everyone's school and work calendars"
    }
    """
    try:
        mux = calendar_mux_service.create_calendar_mux(
            db,
            created_by_id=user_id,
            name=payload.name,
            description=payload.description,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create calendar mux for user {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create calendar mux",
        )

    return mux


# ---------------------------------------------------------------------------
# DELETE
# ---------------------------------------------------------------------------

@router.delete("/{mux_id}", response_model=CalendarMuxDeleted)
def delete_calendar_mux(
    mux_id: str,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    """Delete a calendar mux; 404 if it doesn't exist or isn't the user's."""
    parsed_id = parse_mux_id(mux_id)

    try:
        calendar_mux_service.delete_calendar_mux(db, parsed_id, user_id)
    except CalendarMuxNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Calendar mux not found or access denied",
        )

    return CalendarMuxDeleted()
