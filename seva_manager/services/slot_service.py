import logging
import uuid
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models
from seva_manager.core import exceptions
from seva_manager.models.enums import PaymentStatus

logger = logging.getLogger(__name__)

SLOT_CONSUMING_STATUSES = frozenset({PaymentStatus.PAID, PaymentStatus.PARTIAL})


def is_slot_consuming(status: PaymentStatus) -> bool:
    """Paid and partially paid donors hold a slot; pending donors are only a soft hold."""
    return PaymentStatus(status) in SLOT_CONSUMING_STATUSES


def recompute_booked_slots(donors: Iterable) -> int:
    """Number of slots taken by the given donors of one seva."""
    return sum(1 for donor in donors if is_slot_consuming(donor.payment_status))


async def lock_seva(db: AsyncSession, *, seva_id: uuid.UUID) -> models.Seva:
    """
    Loads the seva with a row lock. Every donor write that can change a seva's
    booked count goes through here first, so capacity checks on one seva run
    one at a time.
    """
    seva = await crud.crud_seva.seva.get(db, id=seva_id, for_update=True)
    if not seva:
        raise exceptions.NotFoundError("Seva not found.")
    return seva


async def sync_booked_slots(db: AsyncSession, seva: models.Seva) -> bool:
    """
    Re-derives ``seva.booked_slots`` from the donors table inside the current
    transaction and returns whether it changed.

    When the pending writes would take more slots than the seva has (and more
    than it already had), the unit of work is rolled back and ``ConflictError`` is raised.
    """
    await db.flush()
    rows = await crud.crud_donor.donor.get_status_rows_for_seva(db, seva_id=seva.id)
    booked = recompute_booked_slots(rows)

    if booked > seva.total_slots and booked > seva.booked_slots:
        seva_name, total_slots = seva.name, seva.total_slots
        await db.rollback()
        logger.warning(f"Rejected booking on seva '{seva_name}': {booked} slots needed, {total_slots} available.")
        raise exceptions.ConflictError(f"Seva '{seva_name}' is fully booked ({total_slots} slots).")

    if booked == seva.booked_slots:
        return False

    logger.info(f"Seva {seva.id} booked slots {seva.booked_slots} -> {booked}")
    seva.booked_slots = booked
    await db.flush()
    return True
