import fastapi
import logging
import tracker_auth.dependencies
import tracker_auth.middleware.auth
import tracker_auth.middleware.rate_limit
import tracker_auth.policy
import tracker_auth.schemas.auth
import tracker_auth.services.session_service
import tracker_auth.utils.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/api/v1/users", tags=["Users"])

limiter = tracker_auth.middleware.rate_limit.limiter

SessionService = tracker_auth.services.session_service.SessionService
Identity = tracker_auth.policy.Identity

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 100


@router.get(
    "/me",
    response_model=tracker_auth.schemas.auth.UserResponse,
    summary="Get current user profile",
    responses={
        401: {"description": "Not authenticated"},
        404: {"description": "User not found"}
    }
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def get_me(
    request: fastapi.Request,
    identity: Identity = fastapi.Depends(tracker_auth.middleware.auth.require_user),
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service)
):
    user = await service.get_user(identity.user_id)
    return tracker_auth.utils.responses.success_response(
        {"user": tracker_auth.schemas.auth.user_to_dict(user)}
    )


@router.get(
    "",
    response_model=tracker_auth.schemas.auth.UserListResponse,
    summary="List users",
    description="Admin only. Paginated with `limit` (1–100, default 50) and `offset`.",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Admin privileges required"}
    }
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def list_users(
    request: fastapi.Request,
    limit: int = fastapi.Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = fastapi.Query(default=0, ge=0),
    identity: Identity = fastapi.Depends(tracker_auth.middleware.auth.require_user),
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service)
):
    tracker_auth.policy.ensure_allowed(tracker_auth.policy.can_list_users(identity), "Admin privileges required")
    users, total = await service.list_users(limit=limit, offset=offset)
    return tracker_auth.utils.responses.success_response(
        {
            "users": [tracker_auth.schemas.auth.user_to_dict(user) for user in users],
            "total": total,
            "limit": limit,
            "offset": offset
        }
    )


@router.get(
    "/{user_id}",
    response_model=tracker_auth.schemas.auth.UserResponse,
    summary="Get a user profile",
    description="Admins can read any profile, users only their own.",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not allowed to read this user"},
        404: {"description": "User not found"}
    }
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def get_user(
    request: fastapi.Request,
    user_id: int,
    identity: Identity = fastapi.Depends(tracker_auth.middleware.auth.require_user),
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service)
):
    tracker_auth.policy.ensure_allowed(tracker_auth.policy.can_read_user(identity, user_id))
    user = await service.get_user(user_id)
    return tracker_auth.utils.responses.success_response(
        {"user": tracker_auth.schemas.auth.user_to_dict(user)}
    )


@router.delete(
    "/{user_id}/sessions",
    response_model=tracker_auth.schemas.auth.RevokedSessionsResponse,
    summary="Revoke all sessions of a user",
    description="""
    Revoke every active refresh token of the user, logging them out on all
    devices once their access tokens expire. Admins can do this for anyone,
    users only for themselves.
    """,
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not allowed to revoke this user's sessions"},
        404: {"description": "User not found"}
    }
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def revoke_sessions(
    request: fastapi.Request,
    user_id: int,
    identity: Identity = fastapi.Depends(tracker_auth.middleware.auth.require_user),
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service)
):
    tracker_auth.policy.ensure_allowed(tracker_auth.policy.can_revoke_sessions(identity, user_id))
    revoked = await service.revoke_sessions(user_id)
    return tracker_auth.utils.responses.success_response({"revoked": revoked})
