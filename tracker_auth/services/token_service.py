import typing
import logging
import dataclasses
import tracker_auth.errors
import tracker_auth.models.base
import tracker_auth.models.user
import tracker_auth.models.refresh_token
import tracker_auth.security.tokens
import tracker_auth.services.user_store
import tracker_auth.services.refresh_token_store

logger = logging.getLogger(__name__)

TokenState = tracker_auth.models.refresh_token.TokenState

REFRESH_REJECTED_MESSAGE = "Refresh token is invalid or expired"


@dataclasses.dataclass(frozen=True)
class RequestMeta:
    ip: typing.Optional[str] = None
    user_agent: typing.Optional[str] = None


@dataclasses.dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str
    user: tracker_auth.models.user.User


class TokenService:
    """Refresh-token lifecycle: issue, rotate with reuse detection, revoke.

    Any refresh token that is presented after it stopped being ACTIVE revokes
    every active token of its owner. A rotated token that comes back means
    two parties hold the same token; revoking the whole family logs both out.
    """

    def __init__(
        self,
        signer: tracker_auth.security.tokens.TokenSigner,
        store: tracker_auth.services.refresh_token_store.RefreshTokenStore,
        users: tracker_auth.services.user_store.UserStore
    ):
        self._signer = signer
        self._store = store
        self._users = users

    async def issue(
        self,
        user: tracker_auth.models.user.User,
        meta: RequestMeta
    ) -> AuthSession:
        session, _ = await self._create_session(user, meta)
        await self._store.commit()
        return session

    async def rotate(self, presented_token: str, meta: RequestMeta) -> AuthSession:
        try:
            claims = self._signer.verify_refresh(presented_token)
        except tracker_auth.security.tokens.TokenError as e:
            logger.debug(f"Refresh token rejected: {e}")
            raise tracker_auth.errors.Unauthorized(REFRESH_REJECTED_MESSAGE, reason="invalid_or_expired")

        now = tracker_auth.models.base.utcnow()
        record = await self._store.find_by_hash(
            tracker_auth.security.tokens.hash_token_id(claims.token_id)
        )
        state = record.state(now) if record else None

        if state is TokenState.ROTATED:
            await self._reject_family(claims.subject, "reuse_detected")
        if state is not TokenState.ACTIVE:
            await self._reject_family(claims.subject, "revoked_or_expired")

        user = await self._users.get(claims.subject)
        if user is None:
            await self._reject_family(claims.subject, "user_not_found")

        session, new_record = await self._create_session(user, meta)

        if not await self._store.mark_rotated(record.token_id, new_record.token_id, now):
            # Lost the race against a concurrent rotation of the same token.
            await self._store.rollback()
            await self._reject_family(claims.subject, "reuse_detected")

        await self._store.commit()
        logger.info(f"Rotated refresh token {record.token_id} -> {new_record.token_id} for user {user.user_id}")
        return session

    async def logout(self, presented_token: typing.Optional[str]) -> None:
        if not presented_token:
            return
        try:
            claims = self._signer.verify_refresh(presented_token)
        except tracker_auth.security.tokens.TokenError as e:
            logger.debug(f"Ignoring unusable refresh token on logout: {e}")
            return

        revoked = await self._store.revoke_by_hash(
            tracker_auth.security.tokens.hash_token_id(claims.token_id),
            tracker_auth.models.base.utcnow()
        )
        await self._store.commit()
        if revoked:
            logger.info(f"Revoked refresh token on logout for user {claims.subject}")

    async def revoke_all_for_user(self, user_id: int) -> int:
        revoked = await self._store.revoke_all_for_user(user_id, tracker_auth.models.base.utcnow())
        await self._store.commit()
        return revoked

    async def _reject_family(self, user_id: int, reason: str) -> typing.NoReturn:
        revoked = await self.revoke_all_for_user(user_id)
        logger.warning(
            f"Refresh token rejected ({reason}); revoked {revoked} active tokens for user {user_id}"
        )
        raise tracker_auth.errors.Unauthorized(REFRESH_REJECTED_MESSAGE, reason=reason)

    async def _create_session(
        self,
        user: tracker_auth.models.user.User,
        meta: RequestMeta
    ) -> typing.Tuple[AuthSession, tracker_auth.models.refresh_token.RefreshToken]:
        token_id = tracker_auth.security.tokens.generate_token_id()
        refresh_token = self._signer.sign_refresh(user.user_id, user.role, token_id)
        access_token = self._signer.sign_access(user.user_id, user.role)

        record = await self._store.add(
            tracker_auth.models.refresh_token.RefreshToken(
                user_id=user.user_id,
                token_hash=tracker_auth.security.tokens.hash_token_id(token_id),
                expires_at=tracker_auth.models.base.utcnow() + self._signer.refresh_ttl,
                created_by_ip=meta.ip,
                user_agent=meta.user_agent
            )
        )
        return AuthSession(access_token=access_token, refresh_token=refresh_token, user=user), record
