import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import models, schemas, services
from seva_manager.db.session import get_db
from seva_manager.dependencies import get_current_profile

router = APIRouter()


@router.put("/{donor_id}", response_model=schemas.Donor)
async def update_donor(
    donor_id: uuid.UUID,
    donor_in: schemas.DonorUpdate,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    return await services.donor_service.create_or_update_donor(
        db, donor_in=donor_in, current_profile=current_profile, donor_id=donor_id
    )


@router.delete("/{donor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_donor(
    donor_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    await services.donor_service.delete_donor(db, donor_id=donor_id, current_profile=current_profile)


@router.post("/{donor_id}/payments", response_model=schemas.PaymentReceipt, status_code=status.HTTP_201_CREATED)
async def record_payment(
    donor_id: uuid.UUID,
    payment_in: schemas.PaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    """Appends a payment to the donor's ledger and returns it with the updated donor."""
    payment, donor = await services.payment_service.record_payment(
        db, donor_id=donor_id, payment_in=payment_in, current_profile=current_profile
    )
    return schemas.PaymentReceipt(
        payment=schemas.PaymentHistory.model_validate(payment),
        donor=schemas.Donor.model_validate(donor),
    )


@router.get("/{donor_id}/payments", response_model=schemas.PaymentHistoryList)
async def list_payments(
    donor_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    return await services.payment_service.list_payment_history(
        db, donor_id=donor_id, current_profile=current_profile
    )
