"""
Role-based capabilities.

Every privileged operation asks for a capability instead of checking role
names itself.
"""
from enum import Enum
from typing import Any

from ecoplay.services.errors import NotAuthorized

ROLES = ("user", "admin", "educator")


class Capability(str, Enum):
    review = "review"  # verify submissions, manage roles, author content
    admin = "admin"    # destructive user management


CAPABILITY_ROLES = {
    Capability.review: frozenset({"admin", "educator"}),
    Capability.admin: frozenset({"admin"}),
}


def has_capability(user: Any, capability: Capability) -> bool:
    role = getattr(user, "role", None)
    return role in CAPABILITY_ROLES[capability]


def require_capability(user: Any, capability: Capability) -> None:
    if not has_capability(user, capability):
        if capability == Capability.admin:
            raise NotAuthorized("Not authorized as an admin")
        raise NotAuthorized("Not authorized as an admin or educator")
