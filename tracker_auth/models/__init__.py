from tracker_auth.models.base import Base, utcnow
from tracker_auth.models.user import User, Role
from tracker_auth.models.refresh_token import RefreshToken, TokenState

__all__ = [
    "Base",
    "utcnow",
    "User",
    "Role",
    "RefreshToken",
    "TokenState",
]
