import logging
import uuid
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models, schemas
from seva_manager.core import exceptions
from seva_manager.core.capabilities import capabilities_for, landing_page_for
from seva_manager.core.config import settings
from seva_manager.models.enums import ChangeEvent, ProfileRole
from seva_manager.realtime import broadcast_change
from seva_manager.utils.codes import generate_referral_code, referral_link

logger = logging.getLogger(__name__)


async def _new_referral_code(db: AsyncSession) -> str:
    for _ in range(settings.CODE_GENERATION_ATTEMPTS):
        candidate = generate_referral_code(settings.REFERRAL_CODE_LENGTH)
        if not await crud.crud_profile.profile.referral_code_exists(db, referral_code=candidate):
            return candidate
    raise exceptions.ConflictError("Could not generate a unique referral code, please retry.")


async def ensure_profile(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    email: str,
    full_name: Optional[str] = None,
    role: Optional[ProfileRole] = None,
    referral_code: Optional[str] = None,
) -> Tuple[models.Profile, bool]:
    """
    Returns the profile for ``user_id``, creating it on first call.

    An existing profile is returned unchanged whatever the other arguments say.
    A new profile gets a fresh referral code and, when ``referral_code`` names
    an existing profile, is linked to that referrer exactly once. New profiles
    can never start out as admins. Returns ``(profile, created)``.
    """
    existing = await crud.crud_profile.profile.get(db, id=user_id)
    if existing:
        return existing, False

    role = ProfileRole(role) if role else ProfileRole.USER
    if role == ProfileRole.ADMIN:
        raise exceptions.AuthorizationError("Admin profiles can only be granted by an existing administrator.")

    referrer = None
    if referral_code and referral_code.strip():
        referrer = await crud.crud_profile.profile.get_by_referral_code(db, referral_code=referral_code)
        if not referrer:
            logger.warning(f"Ignoring unknown referral code '{referral_code}' for new user {user_id}")

    profile = models.Profile(
        id=user_id,
        email=email,
        full_name=(full_name or "").strip() or email.split("@")[0] or "User",
        role=role,
        referral_code=await _new_referral_code(db),
        referred_by=referrer.id if referrer else None,
    )
    db.add(profile)
    try:
        await db.flush()
        if referrer:
            await crud.crud_referral.create_referral(db, referrer_id=referrer.id, referred_user_id=profile.id)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        # A concurrent call for the same user may have won the insert
        winner = await crud.crud_profile.profile.get(db, id=user_id)
        if winner:
            logger.info(f"Profile {user_id} was created concurrently, returning the existing row")
            return winner, False
        logger.warning(f"Profile creation for {user_id} hit a unique constraint: {e.orig}")
        raise exceptions.ConflictError("Could not create the profile: it conflicts with an existing profile.") from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Profile creation failed for {user_id}: {e}", exc_info=True)
        raise exceptions.StoreError("Failed to create profile.") from e

    await db.refresh(profile)
    logger.info(f"Created profile {profile.id} ({profile.email}) with role {profile.role.value}")
    if referrer:
        logger.info(f"Profile {profile.id} was referred by {referrer.id}")
        await broadcast_change("profiles", ChangeEvent.INSERT, {"id": profile.id, "referred_by": referrer.id})
    return profile, True


async def set_admin_role(
    db: AsyncSession, *, email: Optional[str], current_profile: models.Profile
) -> models.Profile:
    if not email or not email.strip():
        raise exceptions.ValidationError("Email is required.")

    profile = await crud.crud_profile.profile.get_by_email(db, email=email)
    if not profile:
        raise exceptions.NotFoundError(f"No profile found for {email.strip()}.")
    if profile.role == ProfileRole.ADMIN:
        return profile

    profile = await crud.crud_profile.profile.update(db, db_obj=profile, obj_in={"role": ProfileRole.ADMIN})
    await crud.commit(db, action="update the profile role")
    await db.refresh(profile)
    logger.info(f"Profile {profile.id} ({profile.email}) elevated to admin by {current_profile.id}")
    await broadcast_change("profiles", ChangeEvent.UPDATE, {"id": profile.id, "referred_by": profile.referred_by})
    return profile


def describe_profile(profile: models.Profile) -> schemas.ProfileWithCapabilities:
    return schemas.ProfileWithCapabilities(
        profile=schemas.Profile.model_validate(profile),
        capabilities=sorted(capabilities_for(profile.role), key=lambda c: c.value),
        landing_page=landing_page_for(profile.role),
    )


async def list_referrals(db: AsyncSession, *, current_profile: models.Profile) -> schemas.ReferralList:
    referred = await crud.crud_profile.profile.get_referred(db, referrer_id=current_profile.id)
    return schemas.ReferralList(
        referral_code=current_profile.referral_code,
        referral_link=referral_link(settings.FRONTEND_URL, current_profile.referral_code),
        total=len(referred),
        referrals=[schemas.Profile.model_validate(p) for p in referred],
    )
