"""Calendar overrides managed by staff — blocked dates and date-specific prices.

Each row targets exactly one resource: either a property or an activity.
"""

import datetime
import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from staydesk.database import Base, UUIDPrimaryKeyMixin

_ONE_RESOURCE = "(property_id IS NULL) <> (activity_id IS NULL)"


class BlockedDate(UUIDPrimaryKeyMixin, Base):
    """A date on which the resource cannot be booked, whatever its load."""

    __tablename__ = "blocked_dates"

    property_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    activity_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)  # maintenance, owner use
    created_at: Mapped[datetime.datetime] = mapped_column(server_default=func.now())

    property: Mapped["Property | None"] = relationship(back_populates="blocked_dates")  # type: ignore[name-defined]  # noqa: F821
    activity: Mapped["Activity | None"] = relationship(back_populates="blocked_dates")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        UniqueConstraint("property_id", "date", name="uq_blocked_dates_property_date"),
        UniqueConstraint("activity_id", "date", name="uq_blocked_dates_activity_date"),
        CheckConstraint(_ONE_RESOURCE, name="ck_blocked_dates_one_resource"),
    )


class PriceOverride(UUIDPrimaryKeyMixin, Base):
    """A price that replaces the base rate of a resource on one date."""

    __tablename__ = "price_overrides"

    property_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    activity_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(server_default=func.now())

    property: Mapped["Property | None"] = relationship(back_populates="price_overrides")  # type: ignore[name-defined]  # noqa: F821
    activity: Mapped["Activity | None"] = relationship(back_populates="price_overrides")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (
        UniqueConstraint("property_id", "date", name="uq_price_overrides_property_date"),
        UniqueConstraint("activity_id", "date", name="uq_price_overrides_activity_date"),
        CheckConstraint(_ONE_RESOURCE, name="ck_price_overrides_one_resource"),
    )
