# Import individual CRUD modules so they can be accessed via the package
from . import crud_profile  # noqa
from . import crud_seva  # noqa
from . import crud_donor  # noqa
from . import crud_payment  # noqa
from . import crud_referral  # noqa
from .base import commit  # noqa

__all__ = [
    "crud_profile",
    "crud_seva",
    "crud_donor",
    "crud_payment",
    "crud_referral",
    "commit",
]
