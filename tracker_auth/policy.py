"""Authorization decisions, one function per resource.

Routes ask the policy and call ``ensure_allowed``; none of them compare
roles inline.
"""
import dataclasses
import tracker_auth.errors
import tracker_auth.models.user

Role = tracker_auth.models.user.Role


@dataclasses.dataclass(frozen=True)
class Identity:
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def can_list_users(identity: Identity) -> bool:
    return identity.is_admin


def can_read_user(identity: Identity, user_id: int) -> bool:
    return identity.is_admin or identity.user_id == user_id


def can_revoke_sessions(identity: Identity, user_id: int) -> bool:
    return identity.is_admin or identity.user_id == user_id


def ensure_allowed(allowed: bool, message: str = "Insufficient permissions") -> None:
    if not allowed:
        raise tracker_auth.errors.Forbidden(message)
