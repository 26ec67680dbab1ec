import uuid
from typing import List, Optional, Tuple

from sqlalchemy import Row, delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from seva_manager.models.donor import Donor
from seva_manager.models.enums import PaymentStatus
from seva_manager.models.payment_history import PaymentHistory
from seva_manager.models.profile import Profile
from seva_manager.models.seva import Seva
from seva_manager.schemas.donor import DonorCreate, DonorUpdate
from .base import CRUDBase

SLOT_CONSUMING_STATUSES = (PaymentStatus.PAID, PaymentStatus.PARTIAL)


class CRUDDonor(CRUDBase[Donor, DonorCreate, DonorUpdate]):
    async def get_by_seva(
        self, db: AsyncSession, *, seva_id: uuid.UUID, added_by: Optional[uuid.UUID] = None
    ) -> List[Donor]:
        stmt = select(Donor).where(Donor.seva_id == seva_id).order_by(Donor.created_at.desc())
        if added_by is not None:
            stmt = stmt.where(Donor.added_by == added_by)
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_by_seva_with_owner(
        self, db: AsyncSession, *, seva_id: uuid.UUID
    ) -> List[Tuple[Donor, Optional[str], Optional[str]]]:
        stmt = (
            select(Donor, Profile.full_name, Profile.email)
            .outerjoin(Profile, Donor.added_by == Profile.id)
            .where(Donor.seva_id == seva_id)
            .order_by(Donor.created_at.desc())
        )
        result = await db.execute(stmt)
        return result.all()

    async def get_by_added_by(self, db: AsyncSession, *, added_by: uuid.UUID) -> List[Donor]:
        stmt = select(Donor).where(Donor.added_by == added_by).order_by(Donor.created_at.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_status_rows_for_seva(self, db: AsyncSession, *, seva_id: uuid.UUID) -> List[Row]:
        """Rows carrying only ``payment_status``, one per donor of the seva."""
        result = await db.execute(select(Donor.payment_status).where(Donor.seva_id == seva_id))
        return result.all()

    async def get_statuses_by_seva_for_user(
        self, db: AsyncSession, *, added_by: uuid.UUID
    ) -> List[Tuple[uuid.UUID, PaymentStatus]]:
        stmt = select(Donor.seva_id, Donor.payment_status).where(Donor.added_by == added_by)
        result = await db.execute(stmt)
        return result.all()

    async def enrollment_number_exists(self, db: AsyncSession, *, enrollment_number: str) -> bool:
        result = await db.execute(select(Donor.id).where(Donor.enrollment_number == enrollment_number))
        return result.first() is not None

    async def ledger_rows(self, db: AsyncSession) -> List[dict]:
        """Donor columns used by reporting, with the seva name resolved (None when orphaned)."""
        stmt = (
            select(
                Seva.name.label("seva_name"),
                Donor.added_by,
                Donor.payment_mode,
                Donor.payment_status,
                Donor.total_amount,
                Donor.paid_amount,
            )
            .select_from(Donor)
            .outerjoin(Seva, Donor.seva_id == Seva.id)
        )
        result = await db.execute(stmt)
        return result.mappings().all()

    async def count(self, db: AsyncSession, *, slot_consuming_only: bool = False) -> int:
        stmt = select(func.count(Donor.id))
        if slot_consuming_only:
            stmt = stmt.where(Donor.payment_status.in_(SLOT_CONSUMING_STATUSES))
        return await db.scalar(stmt)

    async def delete_with_payments(self, db: AsyncSession, *, donor_id: uuid.UUID) -> None:
        await db.execute(delete(PaymentHistory).where(PaymentHistory.donor_id == donor_id))
        await db.execute(delete(Donor).where(Donor.id == donor_id))


donor = CRUDDonor(Donor)
