import enum
from typing import FrozenSet

from seva_manager.models.enums import ProfileRole


class Capability(str, enum.Enum):
    VIEW_ALL_DONORS = "view-all-donors"
    MANAGE_SEVAS = "manage-sevas"
    MANAGE_OWN_DONORS = "manage-own-donors"
    RECORD_ANY_PAYMENT = "record-any-payment"
    VIEW_REPORTS = "view-reports"
    MANAGE_ROLES = "manage-roles"


ROLE_CAPABILITIES = {
    ProfileRole.USER: frozenset({Capability.MANAGE_OWN_DONORS}),
    ProfileRole.ADMIN: frozenset({
        Capability.VIEW_ALL_DONORS,
        Capability.MANAGE_SEVAS,
        Capability.RECORD_ANY_PAYMENT,
        Capability.VIEW_REPORTS,
        Capability.MANAGE_ROLES,
    }),
}

LANDING_PAGES = {
    ProfileRole.USER: "/user/sevas",
    ProfileRole.ADMIN: "/admin/dashboard",
}


def _as_role(role):
    try:
        return ProfileRole(role)
    except ValueError:
        return None


def capabilities_for(role: ProfileRole) -> FrozenSet[Capability]:
    """Everything a profile with ``role`` may do. Unknown roles get nothing."""
    return ROLE_CAPABILITIES.get(_as_role(role), frozenset())


def has_capability(role: ProfileRole, capability: Capability) -> bool:
    return capability in capabilities_for(role)


def landing_page_for(role: ProfileRole) -> str:
    return LANDING_PAGES.get(_as_role(role), LANDING_PAGES[ProfileRole.USER])
