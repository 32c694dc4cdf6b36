import typing
import logging
import asyncio
import dataclasses
import asyncpg
import sqlalchemy.exc
import tracker_auth.errors
import tracker_auth.models.user
import tracker_auth.security.passwords
import tracker_auth.services.user_store
import tracker_auth.services.token_service

logger = logging.getLogger(__name__)

AuthSession = tracker_auth.services.token_service.AuthSession
RequestMeta = tracker_auth.services.token_service.RequestMeta

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

# Connection failures can surface from the driver without a SQLAlchemy wrapper.
STORAGE_ERRORS = (
    sqlalchemy.exc.SQLAlchemyError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError
)


@dataclasses.dataclass(frozen=True)
class RegisterInput:
    username: str
    email: str
    password: str


@dataclasses.dataclass(frozen=True)
class LoginInput:
    email: str
    password: str


class SessionService:
    def __init__(
        self,
        users: tracker_auth.services.user_store.UserStore,
        tokens: tracker_auth.services.token_service.TokenService,
        hasher: tracker_auth.security.passwords.PasswordHasher
    ):
        self._users = users
        self._tokens = tokens
        self._hasher = hasher

    async def register(self, data: RegisterInput, meta: RequestMeta) -> AuthSession:
        password_hash = self._hasher.hash(data.password)
        user = await self._users.create(
            username=data.username,
            email=data.email,
            password_hash=password_hash,
            role=tracker_auth.models.user.Role.USER
        )
        session = await self._tokens.issue(user, meta)
        logger.info(f"Registered user {user.user_id}")
        return session

    async def login(self, data: LoginInput, meta: RequestMeta) -> AuthSession:
        user = await self._users.get_by_email(data.email)
        if user is None:
            self._hasher.verify_dummy(data.password)
            raise tracker_auth.errors.Unauthorized(INVALID_CREDENTIALS_MESSAGE, reason="unknown_email")
        if not self._hasher.verify(data.password, user.password_hash):
            raise tracker_auth.errors.Unauthorized(INVALID_CREDENTIALS_MESSAGE, reason="password_mismatch")
        return await self._tokens.issue(user, meta)

    async def refresh(self, refresh_token: typing.Optional[str], meta: RequestMeta) -> AuthSession:
        if not refresh_token:
            raise tracker_auth.errors.Unauthorized("Refresh token missing", reason="missing")
        return await self._tokens.rotate(refresh_token, meta)

    async def logout(self, refresh_token: typing.Optional[str]) -> None:
        try:
            await self._tokens.logout(refresh_token)
        except STORAGE_ERRORS:
            logger.exception("Failed to revoke refresh token on logout")

    async def get_user(self, user_id: int) -> tracker_auth.models.user.User:
        user = await self._users.get(user_id)
        if user is None:
            raise tracker_auth.errors.NotFound("User not found")
        return user

    async def list_users(self, limit: int, offset: int) -> typing.Tuple[typing.List[tracker_auth.models.user.User], int]:
        users = await self._users.list(limit=limit, offset=offset)
        total = await self._users.count()
        return users, total

    async def revoke_sessions(self, user_id: int) -> int:
        await self.get_user(user_id)
        revoked = await self._tokens.revoke_all_for_user(user_id)
        logger.info(f"Revoked {revoked} refresh tokens for user {user_id}")
        return revoked
