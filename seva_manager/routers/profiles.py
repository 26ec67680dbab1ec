import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import models, schemas, services
from seva_manager.core import exceptions
from seva_manager.db.session import get_db
from seva_manager.dependencies import get_current_profile, get_token_subject

router = APIRouter()


@router.post("/ensure", response_model=schemas.ProfileEnsureResponse)
async def ensure_profile(
    ensure_in: schemas.ProfileEnsureRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    subject: uuid.UUID = Depends(get_token_subject),
):
    """
    Called by the frontend right after sign-in. Creates the caller's profile on
    first login (resolving an optional referral code) and returns it unchanged
    on every later call.
    """
    if ensure_in.userId != subject:
        raise exceptions.AuthorizationError("You can only ensure your own profile.")
    profile, created = await services.profile_service.ensure_profile(
        db,
        user_id=ensure_in.userId,
        email=ensure_in.email,
        full_name=ensure_in.fullName,
        role=ensure_in.role,
        referral_code=ensure_in.referralCode,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return schemas.ProfileEnsureResponse(profile=schemas.Profile.model_validate(profile), created=created)


@router.get("/me", response_model=schemas.ProfileWithCapabilities)
async def read_my_profile(current_profile: models.Profile = Depends(get_current_profile)):
    return services.profile_service.describe_profile(current_profile)


@router.get("/me/referrals", response_model=schemas.ReferralList)
async def read_my_referrals(
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(get_current_profile),
):
    """Profiles that signed up with the caller's referral code, plus the caller's share link."""
    return await services.profile_service.list_referrals(db, current_profile=current_profile)
