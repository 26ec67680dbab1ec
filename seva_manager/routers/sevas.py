import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import models, schemas, services
from seva_manager.core.capabilities import Capability
from seva_manager.db.session import get_db
from seva_manager.dependencies import get_current_profile, require_capability

router = APIRouter()


@router.get("", response_model=List[schemas.SevaWithStats])
async def list_sevas(
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    """Active sevas with the caller's own booked and blocked counts. Admins may include inactive ones."""
    return await services.seva_service.list_sevas_with_stats(
        db, current_profile=current_profile, include_inactive=include_inactive
    )


@router.post("", response_model=schemas.Seva, status_code=status.HTTP_201_CREATED)
async def create_seva(
    seva_in: schemas.SevaCreate,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.MANAGE_SEVAS)),
):
    return await services.seva_service.create_seva(db, seva_in=seva_in, current_profile=current_profile)


@router.get("/{seva_id}", response_model=schemas.SevaWithStats)
async def read_seva(
    seva_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    return await services.seva_service.get_seva_with_stats(db, seva_id=seva_id, current_profile=current_profile)


@router.patch("/{seva_id}", response_model=schemas.Seva)
async def update_seva(
    seva_id: uuid.UUID,
    seva_in: schemas.SevaUpdate,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.MANAGE_SEVAS)),
):
    return await services.seva_service.update_seva(
        db, seva_id=seva_id, seva_in=seva_in, current_profile=current_profile
    )


@router.delete("/{seva_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_seva(
    seva_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.MANAGE_SEVAS)),
):
    """Deletes the seva together with all its donors and their payment history."""
    await services.seva_service.delete_seva(db, seva_id=seva_id, current_profile=current_profile)


@router.get("/{seva_id}/donors", response_model=List[schemas.DonorWithOwner])
async def list_seva_donors(
    seva_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    return await services.donor_service.list_donors_for_seva(db, seva_id=seva_id, current_profile=current_profile)


@router.post("/{seva_id}/donors", response_model=schemas.Donor, status_code=status.HTTP_201_CREATED)
async def create_donor(
    seva_id: uuid.UUID,
    donor_in: schemas.DonorCreate,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.MANAGE_OWN_DONORS)),
):
    """Enrolls a donor against the seva. The payment status is derived from the amounts."""
    return await services.donor_service.create_or_update_donor(
        db, donor_in=donor_in, current_profile=current_profile, seva_id=seva_id
    )
