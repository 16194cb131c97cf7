"""Add-on pricing for stays.

Extras are priced from the add-on catalogue, separately from the nightly rate
resolver, and snapshotted onto the booking so later catalogue edits do not
change what a guest owes.
"""

import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.errors import ValidationError
from staydesk.models.add_on import AddOn, BookingAddOn


@dataclass(frozen=True)
class AddOnSelection:
    add_on_id: uuid.UUID
    quantity: int = 1


def selections_from(items) -> tuple[AddOnSelection, ...]:
    """Convert request items carrying ``add_on_id`` and ``quantity``."""
    return tuple(AddOnSelection(add_on_id=item.add_on_id, quantity=item.quantity) for item in items)


async def price_add_ons(
    db: AsyncSession,
    property_id: uuid.UUID,
    selections: Sequence[AddOnSelection],
) -> list[BookingAddOn]:
    """Build priced, unsaved line items for the add-ons chosen with a stay.

    Raises:
        ValidationError: An add-on is selected twice, has a non-positive
            quantity, or is unknown, inactive or not offered with the property.
    """
    if not selections:
        return []

    ids = [s.add_on_id for s in selections]
    if len(set(ids)) != len(ids):
        raise ValidationError("Each add-on can be selected once; use its quantity instead")

    result = await db.execute(select(AddOn).where(AddOn.id.in_(ids)))
    catalogue = {add_on.id: add_on for add_on in result.scalars().all()}

    lines = []
    for selection in selections:
        if selection.quantity <= 0:
            raise ValidationError("Add-on quantity must be a positive number")
        add_on = catalogue.get(selection.add_on_id)
        if add_on is None or not add_on.offered_with(property_id):
            raise ValidationError(f"Add-on {selection.add_on_id} is not offered with this property")
        lines.append(
            BookingAddOn(
                add_on_id=add_on.id,
                name=add_on.name,
                quantity=selection.quantity,
                unit_price=add_on.price,
                total_price=add_on.price * selection.quantity,
            )
        )
    return lines


def add_ons_total(lines: Sequence[BookingAddOn]) -> Decimal:
    return sum((line.total_price for line in lines), Decimal("0.00"))
