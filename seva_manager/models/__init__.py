# Import the Base class to make it accessible for models
# and for Alembic discovery via Base.metadata
from seva_manager.db.base_class import Base  # noqa: F401

from .enums import ProfileRole, PaymentStatus, PaymentMode, ChangeEvent
from .profile import Profile
from .seva import Seva
from .donor import Donor
from .payment_history import PaymentHistory
from .referral import Referral

__all__ = [
    "Base",
    "Profile",
    "Seva",
    "Donor",
    "PaymentHistory",
    "Referral",
    "ProfileRole",
    "PaymentStatus",
    "PaymentMode",
    "ChangeEvent",
]
