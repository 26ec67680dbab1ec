import uuid
from typing import List, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from seva_manager.models.donor import Donor
from seva_manager.models.payment_history import PaymentHistory
from seva_manager.models.seva import Seva
from seva_manager.schemas.seva import SevaCreate, SevaUpdate
from .base import CRUDBase


class CRUDSeva(CRUDBase[Seva, SevaCreate, SevaUpdate]):
    async def get_sevas(
        self, db: AsyncSession, *, include_inactive: bool = False, skip: int = 0, limit: int = 100
    ) -> List[Seva]:
        stmt = select(Seva).order_by(Seva.created_at.desc()).offset(skip).limit(limit)
        if not include_inactive:
            stmt = stmt.filter(Seva.is_active.is_(True))
        result = await db.execute(stmt)
        return result.scalars().all()

    async def create_seva(self, db: AsyncSession, *, obj_in: SevaCreate, created_by: Optional[uuid.UUID]) -> Seva:
        data = jsonable_encoder(obj_in)
        db_obj = Seva(**data, created_by=created_by, booked_slots=0)
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def update_seva(self, db: AsyncSession, *, db_obj: Seva, obj_in: SevaUpdate) -> Seva:
        update_data = obj_in.model_dump(exclude_unset=True)
        if "amount_options" in update_data:
            # JSON column: store plain numbers
            update_data["amount_options"] = jsonable_encoder(update_data["amount_options"] or [])
        return await self.update(db, db_obj=db_obj, obj_in=update_data)

    async def count(self, db: AsyncSession) -> int:
        return await db.scalar(select(func.count(Seva.id)))

    async def delete_with_donors(self, db: AsyncSession, *, seva_id: uuid.UUID) -> None:
        """Deletes the seva, its donors and their payment ledger rows."""
        donor_ids = select(Donor.id).where(Donor.seva_id == seva_id)
        await db.execute(delete(PaymentHistory).where(PaymentHistory.donor_id.in_(donor_ids)))
        await db.execute(delete(Donor).where(Donor.seva_id == seva_id))
        await db.execute(delete(Seva).where(Seva.id == seva_id))


seva = CRUDSeva(Seva)
