"""Create the default admin account.

Run with ``python -m tracker_auth.seed`` after migrations. Does nothing when
a user with the configured admin email or username already exists.
"""
import asyncio
import logging
import sys
import typing
import tracker_auth.config
import tracker_auth.database
import tracker_auth.models.user
import tracker_auth.schemas.auth
import tracker_auth.security.passwords
import tracker_auth.services.user_store

logger = logging.getLogger(__name__)


async def ensure_admin(
    users: tracker_auth.services.user_store.UserStore,
    hasher: tracker_auth.security.passwords.PasswordHasher,
    settings: tracker_auth.config.Settings
) -> typing.Optional[tracker_auth.models.user.User]:
    if not settings.admin_password:
        raise ValueError("ADMIN_PASSWORD must be set to seed the admin account")

    email = tracker_auth.schemas.auth.normalize_email(settings.admin_email)

    if await users.get_by_email(email) or await users.get_by_username(settings.admin_username):
        logger.info(f"Admin account {email} already exists, skipping")
        return None

    admin = await users.create(
        username=settings.admin_username,
        email=email,
        password_hash=hasher.hash(settings.admin_password),
        role=tracker_auth.models.user.Role.ADMIN
    )
    logger.info(f"Created admin account {email}")
    return admin


async def main() -> None:
    settings = tracker_auth.config.settings
    engine = tracker_auth.database.create_engine(settings)
    session_maker = tracker_auth.database.create_session_maker(engine)
    try:
        async with session_maker() as session:
            await ensure_admin(
                tracker_auth.services.user_store.UserStore(session),
                tracker_auth.security.passwords.PasswordHasher.from_settings(settings),
                settings
            )
            await session.commit()
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    asyncio.run(main())
