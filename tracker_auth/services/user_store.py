import typing
import logging
import sqlalchemy
import sqlalchemy.exc
import sqlalchemy.ext.asyncio
from sqlalchemy import select
import tracker_auth.errors
import tracker_auth.models.user

logger = logging.getLogger(__name__)

User = tracker_auth.models.user.User


class UserStore:
    def __init__(self, session: sqlalchemy.ext.asyncio.AsyncSession):
        self._session = session

    async def get(self, user_id: int) -> typing.Optional[User]:
        result = await self._session.execute(
            select(User).filter(User.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> typing.Optional[User]:
        result = await self._session.execute(
            select(User).filter(User.email == email)
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> typing.Optional[User]:
        result = await self._session.execute(
            select(User).filter(User.username == username)
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        username: str,
        email: str,
        password_hash: str,
        role: tracker_auth.models.user.Role = tracker_auth.models.user.Role.USER
    ) -> User:
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            role=role.value
        )
        self._session.add(user)
        try:
            await self._session.flush()
        except sqlalchemy.exc.IntegrityError as e:
            await self._session.rollback()
            logger.info(f"User insert rejected by unique constraint: {e.orig}")
            raise tracker_auth.errors.Conflict(
                "User with this username or email already exists",
                reason="duplicate_user"
            )
        return user

    async def list(self, limit: int, offset: int) -> typing.List[User]:
        result = await self._session.execute(
            select(User).order_by(User.user_id).limit(limit).offset(offset)
        )
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self._session.execute(
            select(sqlalchemy.func.count()).select_from(User)
        )
        return result.scalar_one()
