import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager.models.referral import Referral


async def create_referral(db: AsyncSession, *, referrer_id: uuid.UUID, referred_user_id: uuid.UUID) -> Referral:
    referral = Referral(referrer_id=referrer_id, referred_user_id=referred_user_id)
    db.add(referral)
    await db.flush()
    return referral
