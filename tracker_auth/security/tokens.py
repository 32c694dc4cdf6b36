import uuid
import hashlib
import datetime
import dataclasses
import typing
import jwt
import tracker_auth.config

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class TokenError(Exception):
    pass


@dataclasses.dataclass(frozen=True)
class TokenClaims:
    subject: int
    role: str
    expires_at: datetime.datetime
    token_id: typing.Optional[str] = None


def generate_token_id() -> str:
    return str(uuid.uuid4())


def hash_token_id(token_id: str) -> str:
    return hashlib.sha256(token_id.encode()).hexdigest()


class TokenSigner:
    """Signs and verifies access and refresh JWTs.

    Access and refresh tokens are signed with different secrets, so leaking
    one secret does not let anyone mint the other kind of token.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: datetime.timedelta,
        refresh_ttl: datetime.timedelta,
        algorithm: str = "HS256"
    ):
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: tracker_auth.config.Settings) -> "TokenSigner":
        return cls(
            access_secret=settings.jwt_access_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl=datetime.timedelta(minutes=settings.access_token_expire_minutes),
            refresh_ttl=datetime.timedelta(days=settings.refresh_token_expire_days),
            algorithm=settings.jwt_algorithm
        )

    def sign_access(
        self,
        user_id: int,
        role: str,
        now: typing.Optional[datetime.datetime] = None
    ) -> str:
        payload = self._base_payload(user_id, role, ACCESS_TOKEN_TYPE, self.access_ttl, now)
        return jwt.encode(payload, self._access_secret, algorithm=self._algorithm)

    def sign_refresh(
        self,
        user_id: int,
        role: str,
        token_id: str,
        now: typing.Optional[datetime.datetime] = None
    ) -> str:
        payload = self._base_payload(user_id, role, REFRESH_TOKEN_TYPE, self.refresh_ttl, now)
        payload["jti"] = token_id
        return jwt.encode(payload, self._refresh_secret, algorithm=self._algorithm)

    def verify_access(self, token: str) -> TokenClaims:
        return self._verify(token, self._access_secret, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> TokenClaims:
        claims = self._verify(token, self._refresh_secret, REFRESH_TOKEN_TYPE)
        if not claims.token_id:
            raise TokenError("Refresh token has no token id")
        return claims

    def _base_payload(
        self,
        user_id: int,
        role: str,
        token_type: str,
        ttl: datetime.timedelta,
        now: typing.Optional[datetime.datetime]
    ) -> typing.Dict[str, typing.Any]:
        issued_at = now or datetime.datetime.now(datetime.timezone.utc)
        return {
            "sub": str(user_id),
            "role": role,
            "type": token_type,
            "iat": issued_at,
            "exp": issued_at + ttl
        }

    def _verify(self, token: str, secret: str, expected_type: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub"]}
            )
        except jwt.ExpiredSignatureError:
            raise TokenError("Token expired")
        except jwt.InvalidTokenError as e:
            raise TokenError(f"Invalid token: {e}")

        if payload.get("type") != expected_type:
            raise TokenError("Wrong token type")

        try:
            subject = int(payload["sub"])
        except (TypeError, ValueError):
            raise TokenError("Invalid token subject")

        return TokenClaims(
            subject=subject,
            role=payload.get("role", ""),
            expires_at=datetime.datetime.fromtimestamp(payload["exp"], tz=datetime.timezone.utc),
            token_id=payload.get("jti")
        )
