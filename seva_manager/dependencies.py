import logging
import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models, security
from seva_manager.core import exceptions
from seva_manager.core.capabilities import Capability, has_capability
from seva_manager.core.config import settings
from seva_manager.db.session import get_db

logger = logging.getLogger(__name__)

# Tokens are issued by the external auth provider; tokenUrl only feeds the OpenAPI docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/token")

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_token_subject(token: str = Depends(oauth2_scheme)) -> uuid.UUID:
    subject = security.subject_from_token(token)
    if subject is None:
        raise credentials_exception
    return subject


async def get_current_profile(
    db: AsyncSession = Depends(get_db), subject: uuid.UUID = Depends(get_token_subject)
) -> models.Profile:
    profile = await crud.crud_profile.profile.get(db, id=subject)
    if profile is None:
        logger.warning(f"Authenticated subject {subject} has no profile yet")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Profile not found. Call /profiles/ensure first.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return profile


def require_capability(capability: Capability):
    async def capability_checker(current_profile: models.Profile = Depends(get_current_profile)) -> models.Profile:
        if not has_capability(current_profile.role, capability):
            raise exceptions.AuthorizationError(
                f"The user doesn't have enough privileges. '{capability.value}' is required."
            )
        return current_profile
    return capability_checker
