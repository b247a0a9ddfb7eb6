"""
Pydantic models for event data.

``EventCreate`` validates the creation payload; ``EventRead`` is the
event snapshot returned by create, register and the listing routes,
with attendees as user ids.  ``EventWithAttendees`` is the populated
listing view, and ``CapacityRead`` / ``TopEventRead`` carry the
derived ranking views.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.db import SQLITE_MAX_INT, to_db_timestamp


class EventBase(BaseModel):
    name: str = Field(..., min_length=1, examples=["Python Meetup"])
    description: str = Field(..., min_length=1, examples=["Monthly talks and networking"])
    date: datetime = Field(..., examples=["2026-11-20T18:00:00Z"])
    capacity: int = Field(..., gt=0, le=SQLITE_MAX_INT, examples=[50])
    price: float = Field(..., ge=0, examples=[10.0])


class EventCreate(EventBase):
    """Schema for creating an event.  The creator is the caller."""

    @field_validator("name", "description")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("date")
    @classmethod
    def storable_date(cls, value: datetime) -> datetime:
        # Stored dates are four-digit UTC years.
        try:
            stored = to_db_timestamp(value)
        except OverflowError:
            raise ValueError("date is out of range") from None
        if len(stored) != len("0000-00-00T00:00:00.000000Z"):
            raise ValueError("date is out of range")
        return value


class EventRead(EventBase):
    """Schema for reading an event from the API."""

    id: int
    rating: float = 0
    creator: int
    attendees: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_row(cls, row: Dict[str, Any], attendees: List[int]) -> "EventRead":
        return cls(**_event_fields(row), attendees=attendees)


class AttendeeRead(BaseModel):
    id: int
    username: str
    email: str


class EventWithAttendees(EventBase):
    """Event with attendee ids resolved to user identity fields."""

    id: int
    rating: float = 0
    creator: int
    attendees: List[AttendeeRead] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any], attendees: List[Dict[str, Any]]) -> "EventWithAttendees":
        return cls(**_event_fields(row), attendees=[AttendeeRead(**a) for a in attendees])


class CapacityRead(BaseModel):
    percentage_filled: float = Field(..., alias="percentageFilled")

    model_config = ConfigDict(populate_by_name=True)


class TopEventRead(BaseModel):
    id: int
    name: str
    attendees_count: int = Field(..., alias="attendeesCount")
    average_rating: float = Field(..., alias="averageRating")

    model_config = ConfigDict(populate_by_name=True)


def _event_fields(row: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": row["id"],
        "name": row["name"],
        "description": row["description"],
        "date": row["date"],
        "capacity": row["capacity"],
        "price": row["price"],
        "rating": row["rating"],
        "creator": row["creator"],
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    }
