from . import slot_service
from . import payment_service
from . import donor_service
from . import seva_service
from . import profile_service
from . import report_service

__all__ = [
    "slot_service",
    "payment_service",
    "donor_service",
    "seva_service",
    "profile_service",
    "report_service",
]
