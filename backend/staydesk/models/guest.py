"""Guest domain model."""

import uuid
from datetime import datetime

from sqlalchemy import String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staydesk.database import Base


class Guest(Base):
    """Guest model — visitors who book stays and activities."""

    __tablename__ = "guests"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(  # noqa: F821
        back_populates="guest", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )
    activity_bookings: Mapped[list["ActivityBooking"]] = relationship(  # noqa: F821
        back_populates="guest", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )
