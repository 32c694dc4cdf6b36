import typing
import datetime
import sqlalchemy.ext.asyncio
from sqlalchemy import select, update
import tracker_auth.models.refresh_token

RefreshToken = tracker_auth.models.refresh_token.RefreshToken


class RefreshTokenStore:
    """Persistence for refresh-token records.

    Nothing here commits on its own; the caller decides the transaction
    boundary with ``commit``/``rollback``.
    """

    def __init__(self, session: sqlalchemy.ext.asyncio.AsyncSession):
        self._session = session

    async def add(self, record: RefreshToken) -> RefreshToken:
        self._session.add(record)
        await self._session.flush()
        return record

    async def find_by_hash(self, token_hash: str) -> typing.Optional[RefreshToken]:
        result = await self._session.execute(
            select(RefreshToken).filter(RefreshToken.token_hash == token_hash)
        )
        return result.scalar_one_or_none()

    async def mark_rotated(
        self,
        token_id: int,
        replaced_by_token_id: int,
        now: datetime.datetime
    ) -> bool:
        # Compare-and-swap: only the first rotation of a record matches.
        result = await self._session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token_id == token_id,
                RefreshToken.replaced_by_token_id.is_(None),
                RefreshToken.revoked_at.is_(None)
            )
            .values(revoked_at=now, replaced_by_token_id=replaced_by_token_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revoke_by_hash(self, token_hash: str, now: datetime.datetime) -> int:
        result = await self._session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.revoked_at.is_(None)
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def revoke_all_for_user(self, user_id: int, now: datetime.datetime) -> int:
        result = await self._session.execute(
            update(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.revoked_at.is_(None)
            )
            .values(revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
