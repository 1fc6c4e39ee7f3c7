"""
Caller identity and role checks shared by endpoints and services.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from billboard_api.core.exceptions import Forbidden
from billboard_api.models.user import User, UserRole


@dataclass(frozen=True)
class Caller:
    """The authenticated principal an operation acts on behalf of."""

    user_id: int
    role: Optional[UserRole]
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        return cls(user_id=user.id, role=user.role, is_admin=user.is_admin)


def ensure_role(caller: Caller, allowed_roles: Iterable[UserRole]) -> None:
    """Raise Forbidden unless the caller's profile role is in the allow-list."""
    if caller.role not in tuple(allowed_roles):
        raise Forbidden("Insufficient permissions")


def ensure_admin(caller: Caller) -> None:
    """Admin-only operations check the admin flag, not the profile role."""
    if not caller.is_admin:
        raise Forbidden("Admin access required")
