"""
Calendar mux schemas - request/response models for /api/calendar-mux.

A calendar mux is a named grouping of family calendars owned by the user
who created it.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class CalendarMuxCreate(BaseModel):
    """
    Schema for POST /api/calendar-mux request body.

    Example request body:
    {
        "name": "Family",
        "description": "Everyone's school and work calendars"
    }
    """
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=1000)


class CalendarMuxOut(BaseModel):
    """Schema for a single calendar mux in API responses."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_by_id: int
    name: str
    description: str
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_timestamp(self, value: datetime) -> str:
        """RFC 3339 in UTC, e.g. "2024-05-01T09:30:00Z"."""
        # SQLite hands timestamps back without tzinfo; they were stored as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class CalendarMuxList(BaseModel):
    """Schema for GET /api/calendar-mux."""
    calendar_muxes: list[CalendarMuxOut]


class CalendarMuxDeleted(BaseModel):
    """Schema for DELETE /api/calendar-mux/{id}."""
    message: str = "Calendar mux deleted successfully"
