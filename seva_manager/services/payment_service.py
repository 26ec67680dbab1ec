import logging
import uuid
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models, schemas
from seva_manager.core import exceptions
from seva_manager.core.capabilities import Capability, has_capability
from seva_manager.models.enums import ChangeEvent, PaymentStatus
from seva_manager.realtime import broadcast_change, donor_record, seva_record
from seva_manager.services import slot_service

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def derive_payment_status(total_amount: Optional[Decimal], paid_amount: Optional[Decimal]) -> PaymentStatus:
    """
    Nothing paid is pending, reaching the total is paid, anything between is
    partial. A zero-amount donor with nothing paid stays pending.
    """
    total = Decimal(total_amount or 0)
    paid = Decimal(paid_amount or 0)
    if paid <= ZERO:
        return PaymentStatus.PENDING
    if paid >= total:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


def validate_amounts(total_amount: Optional[Decimal], paid_amount: Optional[Decimal]) -> Tuple[Decimal, Decimal]:
    total = Decimal(total_amount or 0)
    paid = Decimal(paid_amount or 0)
    if total < ZERO:
        raise exceptions.ValidationError("Total amount cannot be negative.")
    if paid < ZERO:
        raise exceptions.ValidationError("Paid amount cannot be negative.")
    if paid > total:
        raise exceptions.ValidationError("Paid amount cannot exceed the total amount.")
    return total, paid


def ensure_can_pay(donor: models.Donor, current_profile: models.Profile) -> None:
    if donor.added_by == current_profile.id:
        return
    if has_capability(current_profile.role, Capability.RECORD_ANY_PAYMENT):
        return
    raise exceptions.AuthorizationError("Only the donor's owner or an administrator can record payments.")


async def record_payment(
    db: AsyncSession,
    *,
    donor_id: uuid.UUID,
    payment_in: schemas.PaymentCreate,
    current_profile: models.Profile,
) -> Tuple[models.PaymentHistory, models.Donor]:
    """
    Appends one payment to the donor's ledger and applies it to the donor.

    The ledger row, the donor's new paid amount and status, and the seva's
    booked count are committed together. Paid amounts only grow on this path.
    """
    amount = Decimal(payment_in.amount)
    if amount <= ZERO:
        raise exceptions.ValidationError("Payment amount must be greater than zero.")

    donor = await crud.crud_donor.donor.get(db, id=donor_id)
    if not donor:
        raise exceptions.NotFoundError("Donor not found.")
    ensure_can_pay(donor, current_profile)

    seva = await slot_service.lock_seva(db, seva_id=donor.seva_id)
    donor = await crud.crud_donor.donor.get(db, id=donor_id, for_update=True)

    new_paid = Decimal(donor.paid_amount or 0) + amount
    total = Decimal(donor.total_amount or 0)
    if new_paid > total:
        remaining = total - Decimal(donor.paid_amount or 0)
        await db.rollback()
        raise exceptions.ValidationError(f"Payment exceeds the remaining balance of {remaining}.")

    payment = await crud.crud_payment.payment_history.create(
        db,
        obj_in={
            "donor_id": donor.id,
            "amount": amount,
            "payment_mode": payment_in.payment_mode,
            "payment_date": payment_in.payment_date,
            "notes": payment_in.notes or None,
            "created_by": current_profile.id,
        },
    )
    previous_status = donor.payment_status
    donor.paid_amount = new_paid
    donor.payment_mode = payment_in.payment_mode
    donor.payment_date = payment_in.payment_date
    donor.payment_status = derive_payment_status(total, new_paid)

    slots_changed = await slot_service.sync_booked_slots(db, seva)
    await crud.commit(db, action="record the payment")
    await db.refresh(donor)
    logger.info(
        f"Recorded payment of {amount} for donor {donor.id} by {current_profile.id}: "
        f"{previous_status.value} -> {donor.payment_status.value}"
    )

    await broadcast_change("payment_history", ChangeEvent.INSERT, {"id": payment.id, "donor_id": donor.id})
    await broadcast_change("donors", ChangeEvent.UPDATE, donor_record(donor))
    if slots_changed:
        await broadcast_change("sevas", ChangeEvent.UPDATE, seva_record(seva))
    return payment, donor


async def list_payment_history(
    db: AsyncSession, *, donor_id: uuid.UUID, current_profile: models.Profile
) -> schemas.PaymentHistoryList:
    donor = await crud.crud_donor.donor.get(db, id=donor_id)
    if not donor:
        raise exceptions.NotFoundError("Donor not found.")
    if donor.added_by != current_profile.id and not has_capability(current_profile.role, Capability.VIEW_ALL_DONORS):
        raise exceptions.AuthorizationError("You can only view payments of donors you added.")

    payments = await crud.crud_payment.payment_history.get_for_donor(db, donor_id=donor.id)
    return schemas.PaymentHistoryList(
        donor=schemas.Donor.model_validate(donor),
        remaining_amount=Decimal(donor.total_amount or 0) - Decimal(donor.paid_amount or 0),
        payments=[schemas.PaymentHistory.model_validate(p) for p in payments],
    )
