import fastapi
import fastapi.responses
import logging
import typing
import tracker_auth.config
import tracker_auth.dependencies
import tracker_auth.middleware.rate_limit
import tracker_auth.schemas.auth
import tracker_auth.schemas.responses
import tracker_auth.services.session_service
import tracker_auth.utils.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/api/v1/auth", tags=["Auth"])

limiter = tracker_auth.middleware.rate_limit.limiter

SessionService = tracker_auth.services.session_service.SessionService


def _request_meta(request: fastapi.Request) -> tracker_auth.services.session_service.RequestMeta:
    return tracker_auth.services.session_service.RequestMeta(
        ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent")
    )


def _set_refresh_cookie(
    response: fastapi.responses.Response,
    settings: tracker_auth.config.Settings,
    refresh_token: str
) -> None:
    response.set_cookie(
        key=settings.refresh_cookie_name,
        value=refresh_token,
        max_age=settings.refresh_token_max_age,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/"
    )


def _clear_refresh_cookie(
    response: fastapi.responses.Response,
    settings: tracker_auth.config.Settings
) -> None:
    response.delete_cookie(
        key=settings.refresh_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/"
    )


def _session_response(
    session: tracker_auth.services.session_service.AuthSession,
    settings: tracker_auth.config.Settings,
    status_code: int
) -> fastapi.responses.JSONResponse:
    response = tracker_auth.utils.responses.success_response(
        {
            "access_token": session.access_token,
            "token_type": "Bearer",
            "user": tracker_auth.schemas.auth.user_to_dict(session.user)
        },
        status_code=status_code
    )
    _set_refresh_cookie(response, settings, session.refresh_token)
    return response


@router.post(
    "/register",
    response_model=tracker_auth.schemas.auth.SessionResponse,
    status_code=201,
    summary="Register a new user",
    description="""
    Create a new account with role `user` and start a session.

    **Constraints:**
    - `username`: 3–30 characters, latin letters, digits and `_`, must be unique
    - `email`: valid email address, must be unique
    - `password`: at least 8 characters

    Returns the access token and user profile. The refresh token is set as an
    HTTP-only cookie.
    """,
    responses={
        400: {"description": "Validation error"},
        409: {"description": "Username or email already taken"}
    }
)
@limiter.limit(tracker_auth.middleware.rate_limit.auth_limit)
async def register(
    request: fastapi.Request,
    body: tracker_auth.schemas.auth.RegisterRequest,
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service),
    settings: tracker_auth.config.Settings = fastapi.Depends(tracker_auth.dependencies.get_settings)
):
    session = await service.register(
        tracker_auth.services.session_service.RegisterInput(
            username=body.username,
            email=body.email,
            password=body.password
        ),
        _request_meta(request)
    )
    return _session_response(session, settings, status_code=201)


@router.post(
    "/login",
    response_model=tracker_auth.schemas.auth.SessionResponse,
    summary="Log in",
    description="""
    Authenticate with email and password.

    Returns a short-lived access token and the user profile; the refresh token
    is set as an HTTP-only cookie. Unknown email and wrong password produce the
    same error.
    """,
    responses={
        400: {"description": "Validation error"},
        401: {"description": "Invalid email or password"}
    }
)
@limiter.limit(tracker_auth.middleware.rate_limit.auth_limit)
async def login(
    request: fastapi.Request,
    body: tracker_auth.schemas.auth.LoginRequest,
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service),
    settings: tracker_auth.config.Settings = fastapi.Depends(tracker_auth.dependencies.get_settings)
):
    session = await service.login(
        tracker_auth.services.session_service.LoginInput(email=body.email, password=body.password),
        _request_meta(request)
    )
    return _session_response(session, settings, status_code=200)


@router.post(
    "/refresh",
    response_model=tracker_auth.schemas.auth.AccessTokenResponse,
    summary="Rotate the refresh token",
    description="""
    Exchange the refresh token cookie for a new access token and a rotated
    refresh token cookie.

    Every refresh token works once. Presenting a token that was already
    rotated, revoked or has expired revokes all sessions of its owner.
    """,
    responses={
        401: {"description": "Refresh token missing, invalid, expired or reused"}
    }
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def refresh(
    request: fastapi.Request,
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service),
    settings: tracker_auth.config.Settings = fastapi.Depends(tracker_auth.dependencies.get_settings)
):
    session = await service.refresh(
        request.cookies.get(settings.refresh_cookie_name),
        _request_meta(request)
    )
    response = tracker_auth.utils.responses.success_response(
        {"access_token": session.access_token, "token_type": "Bearer"}
    )
    _set_refresh_cookie(response, settings, session.refresh_token)
    return response


@router.post(
    "/logout",
    response_model=tracker_auth.schemas.responses.APIResponse,
    summary="Log out",
    description="""
    Revoke the refresh token cookie, if any, and clear it. Always succeeds;
    the access token expires on its own.
    """
)
@limiter.limit(tracker_auth.middleware.rate_limit.default_limit)
async def logout(
    request: fastapi.Request,
    service: SessionService = fastapi.Depends(tracker_auth.dependencies.get_session_service),
    settings: tracker_auth.config.Settings = fastapi.Depends(tracker_auth.dependencies.get_settings)
):
    token: typing.Optional[str] = request.cookies.get(settings.refresh_cookie_name)
    await service.logout(token)
    response = tracker_auth.utils.responses.success_response({"message": "Logged out successfully"})
    _clear_refresh_cookie(response, settings)
    return response
