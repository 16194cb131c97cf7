"""Add-on models — extras sold with a stay, and the line items a booking carries."""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staydesk.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class AddOn(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An extra (airport transfer, firewood, late check-out) offered with stays.

    Global add-ons are offered with every property; the others only with the
    property they point at.
    """

    __tablename__ = "add_ons"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_global: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    property_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def offered_with(self, property_id: uuid.UUID) -> bool:
        return self.is_active and (self.is_global or self.property_id == property_id)

    def __repr__(self) -> str:
        return f"<AddOn(id={self.id}, name={self.name!r}, price={self.price})>"


class BookingAddOn(UUIDPrimaryKeyMixin, Base):
    """An add-on attached to a booking, priced when the booking was made."""

    __tablename__ = "booking_add_ons"

    booking_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    add_on_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("add_ons.id", ondelete="SET NULL"),
        nullable=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    booking: Mapped["Booking"] = relationship(back_populates="add_ons")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<BookingAddOn(booking_id={self.booking_id}, name={self.name!r}, quantity={self.quantity})>"
