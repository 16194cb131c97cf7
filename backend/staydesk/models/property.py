"""Property model — lodges, cottages, villas, cabins and tents booked by the night."""

from decimal import Decimal

from sqlalchemy import JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staydesk.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A bookable unit occupied by a single party at a time."""

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    location: Mapped[str | None] = mapped_column(String(255), default=None)
    property_type: Mapped[str] = mapped_column(String(50), nullable=False)  # lodge, cottage, villa, cabin, tent
    max_guests: Mapped[int] = mapped_column(default=2)
    base_price_per_night: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    amenities: Mapped[list | None] = mapped_column(JSON, default=list)
    status: Mapped[str] = mapped_column(String(50), default="active", index=True)  # active, maintenance, inactive

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )
    blocked_dates: Mapped[list["BlockedDate"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )
    price_overrides: Mapped[list["PriceOverride"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="raise", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, type={self.property_type!r})>"
