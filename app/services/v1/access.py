# app/services/v1/access.py
"""
Explicit capability checks.

Every workflow operation receives the acting user and checks its role
itself, instead of trusting that a route decorator already did.
"""

from dataclasses import dataclass
from enum import Enum
from common.api_error import AuthorizationError


class ActorRole(str, Enum):
    ADMIN = "Admin"
    STAFF = "Staff"
    CLIENT = "Client"

    @property
    def is_staff(self) -> bool:
        # Admins can do everything staff can
        return self in (ActorRole.ADMIN, ActorRole.STAFF)


@dataclass(frozen=True)
class Actor:
    """An already authenticated user. ``user_id`` is the patient id for clients."""

    user_id: str
    role: ActorRole


STAFF_ROLES = (ActorRole.ADMIN, ActorRole.STAFF)


def require_role(actor: Actor, *allowed: ActorRole) -> None:
    if actor.role not in allowed:
        raise AuthorizationError(
            f"Role {actor.role.value} may not perform this action"
        )


__all__ = ["Actor", "ActorRole", "STAFF_ROLES", "require_role"]
