import logging
import uuid
from collections import Counter
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models, schemas
from seva_manager.core import exceptions
from seva_manager.core.capabilities import Capability, has_capability
from seva_manager.models.enums import ChangeEvent, PaymentStatus
from seva_manager.realtime import broadcast_change, seva_record
from seva_manager.services import slot_service

logger = logging.getLogger(__name__)


def seva_overview(seva: models.Seva, caller_statuses: List[PaymentStatus]) -> schemas.SevaWithStats:
    """Annotates a seva with how many slots the caller's donors hold or block."""
    booked = sum(1 for status in caller_statuses if slot_service.is_slot_consuming(status))
    blocked = sum(1 for status in caller_statuses if PaymentStatus(status) == PaymentStatus.PENDING)
    return schemas.SevaWithStats.model_validate(seva).model_copy(
        update={"user_booked_count": booked, "user_blocked_count": blocked}
    )


async def list_sevas_with_stats(
    db: AsyncSession, *, current_profile: models.Profile, include_inactive: bool = False
) -> List[schemas.SevaWithStats]:
    # Only seva managers get to see deactivated sevas
    include_inactive = include_inactive and has_capability(current_profile.role, Capability.MANAGE_SEVAS)
    sevas = await crud.crud_seva.seva.get_sevas(db, include_inactive=include_inactive)

    statuses_by_seva: Dict[uuid.UUID, List[PaymentStatus]] = {}
    for seva_id, status in await crud.crud_donor.donor.get_statuses_by_seva_for_user(db, added_by=current_profile.id):
        statuses_by_seva.setdefault(seva_id, []).append(status)

    return [seva_overview(seva, statuses_by_seva.get(seva.id, [])) for seva in sevas]


async def get_seva_with_stats(
    db: AsyncSession, *, seva_id: uuid.UUID, current_profile: models.Profile
) -> schemas.SevaWithStats:
    seva = await crud.crud_seva.seva.get(db, id=seva_id)
    if not seva or (not seva.is_active and not has_capability(current_profile.role, Capability.MANAGE_SEVAS)):
        raise exceptions.NotFoundError("Seva not found.")
    donors = await crud.crud_donor.donor.get_by_seva(db, seva_id=seva.id, added_by=current_profile.id)
    return seva_overview(seva, [donor.payment_status for donor in donors])


async def create_seva(
    db: AsyncSession, *, seva_in: schemas.SevaCreate, current_profile: models.Profile
) -> models.Seva:
    seva = await crud.crud_seva.seva.create_seva(db, obj_in=seva_in, created_by=current_profile.id)
    await crud.commit(db, action="create the seva")
    await db.refresh(seva)
    logger.info(f"Seva '{seva.name}' ({seva.id}) created by {current_profile.id} with {seva.total_slots} slots")
    await broadcast_change("sevas", ChangeEvent.INSERT, seva_record(seva))
    return seva


async def update_seva(
    db: AsyncSession, *, seva_id: uuid.UUID, seva_in: schemas.SevaUpdate, current_profile: models.Profile
) -> models.Seva:
    seva = await slot_service.lock_seva(db, seva_id=seva_id)
    if seva_in.total_slots is not None and seva_in.total_slots < seva.booked_slots:
        raise exceptions.ValidationError(
            f"Total slots cannot be lower than the {seva.booked_slots} slots already booked."
        )
    seva = await crud.crud_seva.seva.update_seva(db, db_obj=seva, obj_in=seva_in)
    await crud.commit(db, action="update the seva")
    await db.refresh(seva)
    logger.info(f"Seva {seva.id} updated by {current_profile.id}")
    await broadcast_change("sevas", ChangeEvent.UPDATE, seva_record(seva))
    return seva


async def delete_seva(db: AsyncSession, *, seva_id: uuid.UUID, current_profile: models.Profile) -> None:
    """Deletes the seva together with its donors and their payment history."""
    seva = await slot_service.lock_seva(db, seva_id=seva_id)
    record = seva_record(seva)
    donors = await crud.crud_donor.donor.get_by_seva(db, seva_id=seva.id)
    status_counts = Counter(donor.payment_status.value for donor in donors)

    await crud.crud_seva.seva.delete_with_donors(db, seva_id=seva.id)
    await crud.commit(db, action="delete the seva")
    logger.info(
        f"Seva {record['id']} deleted by {current_profile.id} along with {len(donors)} donors {dict(status_counts)}"
    )
    await broadcast_change("sevas", ChangeEvent.DELETE, record)
