import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from seva_manager.models.payment_history import PaymentHistory
from seva_manager.schemas.payment import PaymentCreate
from .base import CRUDBase


class CRUDPaymentHistory(CRUDBase[PaymentHistory, PaymentCreate, PaymentCreate]):
    async def get_for_donor(self, db: AsyncSession, *, donor_id: uuid.UUID) -> List[PaymentHistory]:
        stmt = (
            select(PaymentHistory)
            .where(PaymentHistory.donor_id == donor_id)
            .order_by(PaymentHistory.payment_date.desc(), PaymentHistory.created_at.desc())
        )
        result = await db.execute(stmt)
        return result.scalars().all()

    async def ledger_rows(self, db: AsyncSession) -> List[dict]:
        result = await db.execute(select(PaymentHistory.amount, PaymentHistory.payment_date))
        return result.mappings().all()


payment_history = CRUDPaymentHistory(PaymentHistory)
