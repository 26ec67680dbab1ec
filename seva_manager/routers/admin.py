import uuid
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import models, schemas, services
from seva_manager.core.capabilities import Capability
from seva_manager.db.session import get_db
from seva_manager.dependencies import require_capability

router = APIRouter(
    tags=["Admin"],
)


@router.post("/set-admin", response_model=schemas.SetAdminResponse)
async def set_admin(
    request_in: schemas.SetAdminRequest,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.MANAGE_ROLES)),
):
    """Grants the admin role to the profile with the given email. Only admins may call this."""
    profile = await services.profile_service.set_admin_role(
        db, email=request_in.email, current_profile=current_profile
    )
    return schemas.SetAdminResponse(
        message=f"{profile.email} is now an admin.",
        profile=schemas.Profile.model_validate(profile),
    )


@router.get("/dashboard", response_model=schemas.DashboardStats)
async def read_dashboard(
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.VIEW_REPORTS)),
):
    return await services.report_service.get_dashboard_stats(db)


@router.get("/reports/revenue", response_model=schemas.RevenueReport)
async def read_revenue_report(
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.VIEW_REPORTS)),
):
    return await services.report_service.get_revenue_report(db)


@router.get("/users", response_model=List[schemas.UserActivity])
async def list_users(
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.VIEW_REPORTS)),
):
    """Every regular user with how many donors they enrolled and how much those donors paid."""
    return await services.report_service.get_user_activity(db)


@router.get("/users/{profile_id}/donors", response_model=List[schemas.Donor])
async def list_user_donors(
    profile_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: models.Profile = Depends(require_capability(Capability.VIEW_ALL_DONORS)),
):
    return await services.donor_service.list_donors_added_by(db, profile_id=profile_id)
