import logging
import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from seva_manager.models.enums import ProfileRole
from seva_manager.models.profile import Profile
from seva_manager.schemas.profile import ProfileBase, ProfileEnsureRequest
from .base import CRUDBase

logger = logging.getLogger(__name__)


class CRUDProfile(CRUDBase[Profile, ProfileEnsureRequest, ProfileBase]):
    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[Profile]:
        result = await db.execute(select(Profile).filter(func.lower(Profile.email) == email.strip().lower()))
        profile = result.scalars().first()
        if not profile:
            logger.warning(f"Profile with email {email} not found.")
        return profile

    async def get_by_referral_code(self, db: AsyncSession, *, referral_code: str) -> Optional[Profile]:
        result = await db.execute(
            select(Profile).filter(Profile.referral_code == referral_code.strip().upper())
        )
        return result.scalars().first()

    async def referral_code_exists(self, db: AsyncSession, *, referral_code: str) -> bool:
        result = await db.execute(select(Profile.id).filter(Profile.referral_code == referral_code))
        return result.first() is not None

    async def get_by_role(self, db: AsyncSession, *, role: ProfileRole) -> List[Profile]:
        stmt = select(Profile).filter(Profile.role == role).order_by(Profile.created_at.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

    async def count_by_role(self, db: AsyncSession, *, role: ProfileRole) -> int:
        return await db.scalar(select(func.count(Profile.id)).filter(Profile.role == role))

    async def get_referred(self, db: AsyncSession, *, referrer_id: uuid.UUID) -> List[Profile]:
        stmt = (
            select(Profile)
            .filter(Profile.referred_by == referrer_id)
            .order_by(Profile.created_at.desc())
        )
        result = await db.execute(stmt)
        return result.scalars().all()


profile = CRUDProfile(Profile)
