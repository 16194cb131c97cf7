"""Pydantic v2 schemas for availability calendars and pre-checks."""

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from staydesk.schemas.activity import SLOT_TIME_PATTERN


class AvailabilityDay(BaseModel):
    """Availability and price of a resource on one date."""

    date: date
    available: bool
    remaining_capacity: int
    price: Decimal
    reason: str | None = None
    note: str | None = None


class AvailabilityWindowResponse(BaseModel):
    resource_kind: str
    resource_id: uuid.UUID
    start_date: date
    end_date: date
    slot_time: str | None = None
    days: list[AvailabilityDay]


class AvailabilityCheckRequest(BaseModel):
    """Optimistic pre-check for a prospective reservation.

    Properties take ``start_date``/``end_date`` (check-in/check-out); activities
    take ``start_date`` as the slot date plus ``slot_time``.
    """

    property_id: uuid.UUID | None = None
    activity_id: uuid.UUID | None = None
    start_date: date
    end_date: date | None = None
    slot_time: str | None = Field(None, pattern=SLOT_TIME_PATTERN)
    party_size: int = Field(1, ge=1)

    @model_validator(mode="after")
    def check_target(self) -> "AvailabilityCheckRequest":
        """Exactly one of property_id / activity_id must be given."""
        if (self.property_id is None) == (self.activity_id is None):
            raise ValueError("Provide exactly one of property_id or activity_id")
        if self.property_id is not None and self.end_date is None:
            raise ValueError("end_date is required for property checks")
        return self


class AvailabilityCheckDay(BaseModel):
    date: date
    admitted: bool
    remaining_capacity: int
    reason: str | None = None


class AvailabilityCheckResponse(BaseModel):
    available: bool
    reason: str | None = None
    conflict_date: date | None = None
    remaining_capacity: int | None = None
    days: list[AvailabilityCheckDay]
    unit_prices: dict[date, Decimal]
    total_price: Decimal
