"""
Pydantic schemas for event requests and responses.
"""
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator, model_validator

from ikada_access.features.events.models import EventType, EventStatus
from ikada_access.features.tenancy.schemas import VisibilityFields, VisibilityUpdate


def as_utc(value: datetime | None) -> datetime | None:
    """
    Aware UTC datetime. Naive values are taken as UTC.

    SQLite keeps only the wall-clock part of a stored datetime, so every value
    is converted here before it is stored or compared.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventBase(BaseModel):
    """Base event schema."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    event_type: EventType = EventType.OFFLINE
    location: str | None = Field(None, max_length=500)
    online_link: str | None = Field(None, max_length=500)
    start_at: datetime
    end_at: datetime | None = None
    max_participants: int | None = Field(None, ge=1)
    status: EventStatus = EventStatus.DRAFT

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_to_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class EventCreate(EventBase, VisibilityFields):
    """Schema for creating an event."""

    @model_validator(mode="after")
    def check_schedule(self):
        if self.end_at is not None and self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        return self


class EventUpdate(VisibilityUpdate):
    """Schema for updating an event. Omitted fields keep their value."""
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    event_type: EventType | None = None
    location: str | None = Field(None, max_length=500)
    online_link: str | None = Field(None, max_length=500)
    start_at: datetime | None = None
    end_at: datetime | None = None
    max_participants: int | None = Field(None, ge=1)
    status: EventStatus | None = None

    @field_validator("start_at", "end_at")
    @classmethod
    def normalize_to_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class EventResponse(EventBase, VisibilityFields):
    """Schema for event responses."""
    id: str
    author_id: str | None
    created_at: datetime
    updated_at: datetime
    
    model_config = {"from_attributes": True}
