import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from seva_manager.core.capabilities import Capability
from seva_manager.models.enums import ProfileRole


class ProfileBase(BaseModel):
    full_name: str
    email: EmailStr
    role: ProfileRole


class Profile(ProfileBase):
    id: uuid.UUID
    referral_code: str
    referred_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileEnsureRequest(BaseModel):
    """Body of the login-flow bootstrap call. Field names follow the frontend's camelCase."""
    userId: uuid.UUID
    email: EmailStr
    fullName: Optional[str] = None
    role: Optional[ProfileRole] = None
    referralCode: Optional[str] = Field(None, max_length=32)


class ProfileEnsureResponse(BaseModel):
    profile: Profile
    created: bool


class ProfileWithCapabilities(BaseModel):
    profile: Profile
    capabilities: List[Capability]
    landing_page: str


class SetAdminRequest(BaseModel):
    # Optional so a missing email reaches the service and becomes a 400
    email: Optional[str] = None


class SetAdminResponse(BaseModel):
    message: str
    profile: Profile


class ReferralList(BaseModel):
    referral_code: str
    referral_link: str
    total: int
    referrals: List[Profile]
