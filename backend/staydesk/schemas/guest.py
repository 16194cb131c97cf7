"""Pydantic v2 request/response schemas for guest details."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class GuestDetails(BaseModel):
    """Contact details a guest supplies when booking without an account."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = Field(None, max_length=50)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class GuestResponse(BaseModel):
    """Public guest information returned by the API."""

    id: uuid.UUID
    name: str
    email: str
    phone: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
