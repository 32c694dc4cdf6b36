import fastapi
import sqlalchemy.ext.asyncio
import tracker_auth.config
import tracker_auth.database
import tracker_auth.security.passwords
import tracker_auth.security.tokens
import tracker_auth.services.user_store
import tracker_auth.services.refresh_token_store
import tracker_auth.services.token_service
import tracker_auth.services.session_service


def get_settings(request: fastapi.Request) -> tracker_auth.config.Settings:
    return request.app.state.settings


def get_token_signer(request: fastapi.Request) -> tracker_auth.security.tokens.TokenSigner:
    return request.app.state.token_signer


def get_password_hasher(request: fastapi.Request) -> tracker_auth.security.passwords.PasswordHasher:
    return request.app.state.password_hasher


def build_session_service(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    signer: tracker_auth.security.tokens.TokenSigner,
    hasher: tracker_auth.security.passwords.PasswordHasher
) -> tracker_auth.services.session_service.SessionService:
    users = tracker_auth.services.user_store.UserStore(session)
    tokens = tracker_auth.services.token_service.TokenService(
        signer=signer,
        store=tracker_auth.services.refresh_token_store.RefreshTokenStore(session),
        users=users
    )
    return tracker_auth.services.session_service.SessionService(users=users, tokens=tokens, hasher=hasher)


async def get_session_service(
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(tracker_auth.database.get_db),
    signer: tracker_auth.security.tokens.TokenSigner = fastapi.Depends(get_token_signer),
    hasher: tracker_auth.security.passwords.PasswordHasher = fastapi.Depends(get_password_hasher)
) -> tracker_auth.services.session_service.SessionService:
    return build_session_service(session, signer, hasher)
