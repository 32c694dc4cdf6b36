import asyncio
import dataclasses
import itertools
import typing
import tracker_auth.errors
import tracker_auth.models.user
import tracker_auth.models.refresh_token
import tracker_auth.services.token_service
import tracker_auth.services.session_service

User = tracker_auth.models.user.User
RefreshToken = tracker_auth.models.refresh_token.RefreshToken


class FakeDatabase:
    def __init__(self):
        self.users: typing.Dict[int, User] = {}
        self.tokens: typing.Dict[int, RefreshToken] = {}
        self._user_ids = itertools.count(1)
        self._token_ids = itertools.count(1)

    def next_user_id(self) -> int:
        return next(self._user_ids)

    def next_token_id(self) -> int:
        return next(self._token_ids)

    def tokens_for(self, user_id: int) -> typing.List[RefreshToken]:
        return [t for t in self.tokens.values() if t.user_id == user_id]


class InMemoryUserStore:
    def __init__(self, db: FakeDatabase):
        self._db = db

    async def get(self, user_id):
        return self._db.users.get(user_id)

    async def get_by_email(self, email):
        return next((u for u in self._db.users.values() if u.email == email), None)

    async def get_by_username(self, username):
        return next((u for u in self._db.users.values() if u.username == username), None)

    async def create(self, username, email, password_hash, role=tracker_auth.models.user.Role.USER):
        for existing in self._db.users.values():
            if existing.username == username or existing.email == email:
                raise tracker_auth.errors.Conflict(
                    "User with this username or email already exists",
                    reason="duplicate_user"
                )
        user = User(
            user_id=self._db.next_user_id(),
            username=username,
            email=email,
            password_hash=password_hash,
            role=role.value
        )
        self._db.users[user.user_id] = user
        return user

    async def list(self, limit, offset):
        users = sorted(self._db.users.values(), key=lambda u: u.user_id)
        return users[offset:offset + limit]

    async def count(self):
        return len(self._db.users)


class InMemoryRefreshTokenStore:
    """One instance per simulated database session."""

    def __init__(self, db: FakeDatabase):
        self._db = db
        self._pending: typing.List[int] = []

    async def add(self, record):
        record.token_id = self._db.next_token_id()
        self._db.tokens[record.token_id] = record
        self._pending.append(record.token_id)
        return record

    async def find_by_hash(self, token_hash):
        # Yield so concurrent rotations interleave between read and write.
        await asyncio.sleep(0)
        return next((t for t in self._db.tokens.values() if t.token_hash == token_hash), None)

    async def mark_rotated(self, token_id, replaced_by_token_id, now):
        record = self._db.tokens.get(token_id)
        if record is None or record.replaced_by_token_id is not None or record.revoked_at is not None:
            return False
        record.revoked_at = now
        record.replaced_by_token_id = replaced_by_token_id
        return True

    async def revoke_by_hash(self, token_hash, now):
        revoked = 0
        for record in self._db.tokens.values():
            if record.token_hash == token_hash and record.revoked_at is None:
                record.revoked_at = now
                revoked += 1
        return revoked

    async def revoke_all_for_user(self, user_id, now):
        revoked = 0
        for record in self._db.tokens.values():
            if record.user_id == user_id and record.revoked_at is None:
                record.revoked_at = now
                revoked += 1
        return revoked

    async def commit(self):
        self._pending.clear()

    async def rollback(self):
        for token_id in self._pending:
            self._db.tokens.pop(token_id, None)
        self._pending.clear()


@dataclasses.dataclass
class FakeServices:
    users: InMemoryUserStore
    tokens: tracker_auth.services.token_service.TokenService
    sessions: tracker_auth.services.session_service.SessionService


def build_fake_services(db: FakeDatabase, signer, hasher) -> FakeServices:
    users = InMemoryUserStore(db)
    tokens = tracker_auth.services.token_service.TokenService(
        signer=signer,
        store=InMemoryRefreshTokenStore(db),
        users=users
    )
    sessions = tracker_auth.services.session_service.SessionService(
        users=users,
        tokens=tokens,
        hasher=hasher
    )
    return FakeServices(users=users, tokens=tokens, sessions=sessions)
