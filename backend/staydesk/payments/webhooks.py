"""Stripe webhook event handlers — move reservations along after payment.

Checkout sessions and payment intents carry ``reservation_id`` and
``reservation_kind`` in their metadata. A successful payment confirms the
reservation; a failed one cancels it and releases its dates.
"""

import logging
import uuid

import stripe
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.errors import InvalidTransitionError, NotFoundError
from staydesk.services.reservation_lifecycle import confirm_payment, get_reservation, transition_status
from staydesk.services.resources import ResourceKind

logger = logging.getLogger(__name__)

PAYMENT_FAILED_REASON = "Payment failed"


def _metadata_value(obj, key: str) -> str | None:
    metadata = getattr(obj, "metadata", None)
    if not metadata:
        return None
    try:
        return metadata[key]
    except KeyError:
        return None


def _reservation_ref(obj) -> tuple[ResourceKind, uuid.UUID] | None:
    """Extract the reservation a Stripe object pays for, if any."""
    raw_id = _metadata_value(obj, "reservation_id")
    if not raw_id:
        return None
    try:
        reservation_id = uuid.UUID(raw_id)
        kind = ResourceKind(_metadata_value(obj, "reservation_kind") or ResourceKind.PROPERTY.value)
    except ValueError:
        logger.warning("Malformed reservation metadata on %s", getattr(obj, "id", "?"))
        return None
    return kind, reservation_id


async def handle_payment_succeeded(db: AsyncSession, event: stripe.Event) -> None:
    """Handle checkout.session.completed and payment_intent.succeeded."""
    obj = event.data.object
    ref = _reservation_ref(obj)
    if ref is None:
        logger.info("%s %s carries no reservation, skipping", event.type, obj.id)
        return

    kind, reservation_id = ref
    try:
        reservation = await confirm_payment(db, kind, reservation_id)
    except NotFoundError:
        logger.warning("No %s reservation %s for %s %s", kind.value, reservation_id, event.type, obj.id)
        return
    except InvalidTransitionError as e:
        # Paid after the reservation was cancelled; needs a manual refund.
        logger.warning(
            "Payment %s arrived for %s reservation %s in status %s",
            obj.id,
            kind.value,
            reservation_id,
            e.current,
        )
        return

    logger.info("Payment confirmed %s reservation %s (%s)", kind.value, reservation.id, event.type)


async def handle_payment_failed(db: AsyncSession, event: stripe.Event) -> None:
    """Handle payment_intent.payment_failed — cancel the unpaid reservation."""
    obj = event.data.object
    ref = _reservation_ref(obj)
    if ref is None:
        logger.info("%s %s carries no reservation, skipping", event.type, obj.id)
        return

    kind, reservation_id = ref
    try:
        reservation = await get_reservation(db, kind, reservation_id)
    except NotFoundError:
        logger.warning("No %s reservation %s for failed payment %s", kind.value, reservation_id, obj.id)
        return

    # A later attempt may already have paid; only unpaid reservations are released.
    if reservation.status != "pending":
        logger.info(
            "Ignoring failed payment %s for %s reservation %s in status %s",
            obj.id,
            kind.value,
            reservation_id,
            reservation.status,
        )
        return

    await transition_status(db, reservation, "cancelled", reason=PAYMENT_FAILED_REASON)

    logger.info("Payment failed: %s reservation %s cancelled", kind.value, reservation_id)
