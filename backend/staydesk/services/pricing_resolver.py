"""Pricing resolver — the rate of a resource on a date.

A price override for ``(resource, date)`` replaces the base price for that
date only. Totals are the sum of resolved per-date prices; discounts, taxes
and fees belong to checkout, not here.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.models.calendar import PriceOverride
from staydesk.services.dates import ONE_DAY, iter_dates, validate_range
from staydesk.services.resources import Resource

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class Quote:
    """Resolved unit prices for a range and the amount owed for a party."""

    unit_prices: dict[date, Decimal]
    party_size: int
    total: Decimal


def _override_column(resource: Resource):
    return PriceOverride.property_id if resource.is_property else PriceOverride.activity_id


async def resolve_prices(db: AsyncSession, resource: Resource, start: date, end: date) -> dict[date, Decimal]:
    """Resolve the unit price of every date in ``[start, end)``."""
    validate_range(start, end)
    column = _override_column(resource)
    result = await db.execute(
        select(PriceOverride.date, PriceOverride.price).where(
            column == resource.id,
            PriceOverride.date >= start,
            PriceOverride.date < end,
        )
    )
    overrides = {day: Decimal(price) for day, price in result.all()}
    return {day: overrides.get(day, resource.base_price) for day in iter_dates(start, end)}


async def resolve_price(db: AsyncSession, resource: Resource, day: date) -> Decimal:
    """Resolve the unit price of a single date."""
    prices = await resolve_prices(db, resource, day, day + ONE_DAY)
    return prices[day]


def total_for(resource: Resource, unit_prices: dict[date, Decimal], party_size: int) -> Decimal:
    """Amount owed: per-night sum for a stay, per-seat price times seats for an activity."""
    subtotal = sum(unit_prices.values(), Decimal("0"))
    if not resource.is_property:
        subtotal *= party_size
    return subtotal.quantize(CENTS)


async def quote(db: AsyncSession, resource: Resource, start: date, end: date, party_size: int) -> Quote:
    unit_prices = await resolve_prices(db, resource, start, end)
    return Quote(
        unit_prices=unit_prices,
        party_size=party_size,
        total=total_for(resource, unit_prices, party_size),
    )
