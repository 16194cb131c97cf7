"""Guest identity service — find-or-create guests for public bookings."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from staydesk.database import translate_persistence_errors
from staydesk.models.guest import Guest

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_guest_by_email(db: AsyncSession, email: str) -> Guest | None:
    result = await db.execute(select(Guest).where(Guest.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def upsert_guest(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    phone: str | None = None,
) -> Guest:
    """Return the guest registered under ``email``, creating it if needed.

    An existing guest keeps its name; a missing phone number is filled in.

    Raises:
        TransientPersistenceError: The store is unreachable.
    """
    async with translate_persistence_errors():
        guest = await get_guest_by_email(db, email)
        if guest is not None:
            if phone and not guest.phone:
                guest.phone = phone
                await db.flush()
            return guest

        guest = Guest(name=name.strip(), email=normalize_email(email), phone=phone)
        db.add(guest)
        try:
            await db.flush()
        except IntegrityError:
            # Another request registered the same email first.
            await db.rollback()
            guest = await get_guest_by_email(db, email)
            if guest is None:
                raise
            return guest

    logger.info("Registered guest %s", guest.id)
    return guest
