import typing
import logging
import fastapi
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import tracker_auth.dependencies
import tracker_auth.errors
import tracker_auth.policy
import tracker_auth.security.tokens

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def identity_from_token(
    token: str,
    signer: tracker_auth.security.tokens.TokenSigner
) -> typing.Optional[tracker_auth.policy.Identity]:
    try:
        claims = signer.verify_access(token)
    except tracker_auth.security.tokens.TokenError as e:
        logger.debug(f"Access token rejected: {e}")
        return None

    try:
        role = tracker_auth.policy.Role(claims.role)
    except ValueError:
        logger.debug(f"Access token carries unknown role: {claims.role!r}")
        return None

    return tracker_auth.policy.Identity(user_id=claims.subject, role=role)


async def get_current_user_optional(
    credentials: typing.Optional[HTTPAuthorizationCredentials] = fastapi.Depends(_bearer_scheme),
    signer: tracker_auth.security.tokens.TokenSigner = fastapi.Depends(tracker_auth.dependencies.get_token_signer)
) -> typing.Optional[tracker_auth.policy.Identity]:
    if not credentials:
        return None
    return identity_from_token(credentials.credentials, signer)


async def require_user(
    identity: typing.Optional[tracker_auth.policy.Identity] = fastapi.Depends(get_current_user_optional)
) -> tracker_auth.policy.Identity:
    if identity is None:
        raise tracker_auth.errors.Unauthorized("Invalid or expired access token")
    return identity

