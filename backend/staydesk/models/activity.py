"""Activity model — guided experiences booked per date and time slot."""

from decimal import Decimal

from sqlalchemy import JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staydesk.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Activity(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An activity whose slots are shared by several parties up to ``max_participants``."""

    __tablename__ = "activities"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    duration_minutes: Mapped[int | None] = mapped_column(default=None)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # per participant
    min_participants: Mapped[int] = mapped_column(default=1)
    max_participants: Mapped[int] = mapped_column(nullable=False)
    time_slots: Mapped[list | None] = mapped_column(JSON, default=list)  # ["09:00", "14:00"]
    status: Mapped[str] = mapped_column(String(50), default="active", index=True)  # active, inactive

    # Relationships
    bookings: Mapped[list["ActivityBooking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="activity", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )
    blocked_dates: Mapped[list["BlockedDate"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="activity", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )
    price_overrides: Mapped[list["PriceOverride"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="activity", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, name={self.name!r}, capacity={self.max_participants})>"
