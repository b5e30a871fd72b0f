"""Explicit actor context passed into every scoped operation."""

from dataclasses import dataclass

from ..errors import AuthorizationError
from ..models import Admin, AdminRole


@dataclass(frozen=True)
class ActorContext:
    """The administrative actor a call is made on behalf of."""
    id: int
    role: AdminRole

    @classmethod
    def for_admin(cls, admin: Admin) -> "ActorContext":
        return cls(id=admin.id, role=admin.role)

    @property
    def is_super(self) -> bool:
        return self.role is AdminRole.super


def require_super(actor: ActorContext, action: str = "this action") -> None:
    """Refuse the call unless the actor is a super admin."""
    if not actor.is_super:
        raise AuthorizationError(actor.id, f"Super admin required for {action}")
