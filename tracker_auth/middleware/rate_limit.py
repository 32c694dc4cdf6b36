"""Per-client rate limiting.

Route decorators need the limiter at import time, before any settings are
known, so limits are passed as callables and resolved on every request from
whatever ``configure_limiter`` was last given.
"""
import logging
from slowapi import Limiter
from slowapi.util import get_remote_address
import tracker_auth.config

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, enabled=False)

_limits = {
    "default": "60/minute",
    "auth": "10/minute"
}


def configure_limiter(settings: tracker_auth.config.Settings) -> Limiter:
    limiter.enabled = settings.rate_limit_enabled
    _limits["default"] = f"{settings.rate_limit_per_minute}/minute"
    _limits["auth"] = f"{settings.rate_limit_auth_per_minute}/minute"
    limiter.reset()

    if limiter.enabled:
        logger.info(f"Rate limiting enabled: {_limits['default']} default, {_limits['auth']} on credentials")
    return limiter


def default_limit() -> str:
    return _limits["default"]


def auth_limit() -> str:
    # Register and login only: each attempt costs a full password hash.
    return _limits["auth"]
