import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models, schemas
from seva_manager.core import exceptions
from seva_manager.core.capabilities import Capability, has_capability
from seva_manager.core.config import settings
from seva_manager.models.enums import ChangeEvent
from seva_manager.realtime import broadcast_change, donor_record, seva_record
from seva_manager.services import slot_service
from seva_manager.services.payment_service import derive_payment_status, validate_amounts
from seva_manager.utils.codes import generate_enrollment_number

logger = logging.getLogger(__name__)


async def _new_enrollment_number(db: AsyncSession) -> str:
    for _ in range(settings.CODE_GENERATION_ATTEMPTS):
        candidate = generate_enrollment_number()
        if not await crud.crud_donor.donor.enrollment_number_exists(db, enrollment_number=candidate):
            return candidate
    raise exceptions.ConflictError("Could not generate a unique enrollment number, please retry.")


def _ensure_owner(donor: models.Donor, current_profile: models.Profile) -> None:
    if donor.added_by != current_profile.id:
        raise exceptions.AuthorizationError("You can only modify donors you added.")


async def create_or_update_donor(
    db: AsyncSession,
    *,
    donor_in: Union[schemas.DonorCreate, schemas.DonorUpdate],
    current_profile: models.Profile,
    seva_id: Optional[uuid.UUID] = None,
    donor_id: Optional[uuid.UUID] = None,
) -> models.Donor:
    """
    Writes a full donor record from the enrollment form.

    Amounts are taken as given (the payment ledger is not touched) and the
    payment status is always re-derived from them. Creating needs ``seva_id``,
    updating needs ``donor_id``; a donor never moves to another seva.
    """
    total, paid = validate_amounts(donor_in.total_amount, donor_in.paid_amount)
    fields = donor_in.model_dump(exclude={"total_amount", "paid_amount"})
    fields.update(
        total_amount=total,
        paid_amount=paid,
        payment_status=derive_payment_status(total, paid),
    )

    if donor_id is None:
        if seva_id is None:
            raise exceptions.ValidationError("A seva is required to add a donor.")
        seva = await slot_service.lock_seva(db, seva_id=seva_id)
        if not seva.is_active:
            raise exceptions.ValidationError(f"Seva '{seva.name}' is not accepting enrollments.")
        fields.update(
            seva_id=seva.id,
            added_by=current_profile.id,
            enrollment_number=await _new_enrollment_number(db),
        )
        donor = await crud.crud_donor.donor.create(db, obj_in=fields)
        event = ChangeEvent.INSERT
    else:
        donor = await crud.crud_donor.donor.get(db, id=donor_id)
        if not donor:
            raise exceptions.NotFoundError("Donor not found.")
        _ensure_owner(donor, current_profile)
        seva = await slot_service.lock_seva(db, seva_id=donor.seva_id)
        donor = await crud.crud_donor.donor.get(db, id=donor_id, for_update=True)
        donor = await crud.crud_donor.donor.update(db, db_obj=donor, obj_in=fields)
        event = ChangeEvent.UPDATE

    slots_changed = await slot_service.sync_booked_slots(db, seva)
    await crud.commit(db, action="save the donor")
    await db.refresh(donor)
    logger.info(f"Donor {donor.id} ({donor.enrollment_number}) saved by {current_profile.id}, status {donor.payment_status.value}")

    await broadcast_change("donors", event, donor_record(donor))
    if slots_changed:
        await broadcast_change("sevas", ChangeEvent.UPDATE, seva_record(seva))
    return donor


async def delete_donor(db: AsyncSession, *, donor_id: uuid.UUID, current_profile: models.Profile) -> None:
    donor = await crud.crud_donor.donor.get(db, id=donor_id)
    if not donor:
        raise exceptions.NotFoundError("Donor not found.")
    _ensure_owner(donor, current_profile)
    record = donor_record(donor)

    seva = await slot_service.lock_seva(db, seva_id=donor.seva_id)
    await crud.crud_donor.donor.delete_with_payments(db, donor_id=donor.id)
    slots_changed = await slot_service.sync_booked_slots(db, seva)
    await crud.commit(db, action="delete the donor")
    logger.info(f"Donor {donor_id} deleted by {current_profile.id}")

    await broadcast_change("donors", ChangeEvent.DELETE, record)
    if slots_changed:
        await broadcast_change("sevas", ChangeEvent.UPDATE, seva_record(seva))


async def list_donors_for_seva(
    db: AsyncSession, *, seva_id: uuid.UUID, current_profile: models.Profile
) -> List[schemas.DonorWithOwner]:
    """Admins see every donor of the seva with who added it; everyone else sees their own."""
    seva = await crud.crud_seva.seva.get(db, id=seva_id)
    if not seva or (not seva.is_active and not has_capability(current_profile.role, Capability.MANAGE_SEVAS)):
        raise exceptions.NotFoundError("Seva not found.")

    if has_capability(current_profile.role, Capability.VIEW_ALL_DONORS):
        rows = await crud.crud_donor.donor.get_by_seva_with_owner(db, seva_id=seva.id)
        return [
            schemas.DonorWithOwner.model_validate(donor).model_copy(
                update={"added_by_name": full_name, "added_by_email": email}
            )
            for donor, full_name, email in rows
        ]

    donors = await crud.crud_donor.donor.get_by_seva(db, seva_id=seva.id, added_by=current_profile.id)
    return [schemas.DonorWithOwner.model_validate(donor) for donor in donors]


async def list_donors_added_by(db: AsyncSession, *, profile_id: uuid.UUID) -> List[models.Donor]:
    profile = await crud.crud_profile.profile.get(db, id=profile_id)
    if not profile:
        raise exceptions.NotFoundError("Profile not found.")
    return await crud.crud_donor.donor.get_by_added_by(db, added_by=profile.id)
