"""Pydantic v2 request/response schemas for activity endpoints."""

import re
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staydesk.schemas.property import SLUG_PATTERN

ACTIVITY_STATUS_PATTERN = "^(active|inactive)$"
SLOT_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ActivityCreate(BaseModel):
    """Schema for creating a new activity."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str = Field(..., min_length=1, max_length=255, pattern=SLUG_PATTERN)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    activity_type: str = Field(..., min_length=1, max_length=50)
    duration_minutes: int | None = Field(None, ge=1)
    price: Decimal = Field(..., ge=0)
    min_participants: int = Field(1, ge=1)
    max_participants: int = Field(..., ge=1)
    time_slots: list[str] = Field(default_factory=list)
    status: str = Field("active", pattern=ACTIVITY_STATUS_PATTERN)

    @model_validator(mode="after")
    def check_participants_and_slots(self) -> "ActivityCreate":
        """Validate the participant bounds and slot labels."""
        if self.min_participants > self.max_participants:
            raise ValueError("min_participants cannot exceed max_participants")
        _check_slots(self.time_slots)
        return self


class ActivityUpdate(BaseModel):
    """Schema for partially updating an activity. All fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=SLUG_PATTERN)
    description: str | None = None
    location: str | None = Field(None, max_length=255)
    activity_type: str | None = Field(None, min_length=1, max_length=50)
    duration_minutes: int | None = Field(None, ge=1)
    price: Decimal | None = Field(None, ge=0)
    min_participants: int | None = Field(None, ge=1)
    max_participants: int | None = Field(None, ge=1)
    time_slots: list[str] | None = None
    status: str | None = Field(None, pattern=ACTIVITY_STATUS_PATTERN)

    @model_validator(mode="after")
    def check_participants_and_slots(self) -> "ActivityUpdate":
        if (
            self.min_participants is not None
            and self.max_participants is not None
            and self.min_participants > self.max_participants
        ):
            raise ValueError("min_participants cannot exceed max_participants")
        if self.time_slots is not None:
            _check_slots(self.time_slots)
        return self


def _check_slots(time_slots: list[str]) -> None:
    for slot in time_slots:
        if not re.match(SLOT_TIME_PATTERN, slot):
            raise ValueError(f"Invalid time slot '{slot}', expected HH:MM")
    if len(set(time_slots)) != len(time_slots):
        raise ValueError("Duplicate time slots")


class ActivityResponse(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None = None
    location: str | None = None
    activity_type: str
    duration_minutes: int | None = None
    price: Decimal
    min_participants: int
    max_participants: int
    time_slots: list[str] | None = None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ActivitySearchItem(ActivityResponse):
    """Activity listing entry, annotated when the search carries a date."""

    is_available: bool | None = None
    remaining_capacity: int | None = None


class ActivityListResponse(BaseModel):
    items: list[ActivitySearchItem]
    total: int
