import asyncio
import logging
import os
import typing
import fastapi
import sqlalchemy
import sqlalchemy.ext.asyncio
import tracker_auth.config

logger = logging.getLogger(__name__)

ALEMBIC_INI = os.path.join(os.path.dirname(__file__), '..', 'alembic.ini')


async def run_migrations(settings: tracker_auth.config.Settings) -> None:
    from alembic import command
    from alembic.config import Config

    alembic_cfg = Config(ALEMBIC_INI)
    alembic_cfg.set_main_option("sqlalchemy.url", settings.database_url)
    alembic_cfg.attributes["configured_by_app"] = True

    try:
        await asyncio.get_running_loop().run_in_executor(
            None,
            lambda: command.upgrade(alembic_cfg, "head")
        )
        logger.info("Database migrations completed successfully")
    except Exception as e:
        logger.error(f"Error running migrations: {str(e)}")
        raise


def create_engine(settings: tracker_auth.config.Settings) -> sqlalchemy.ext.asyncio.AsyncEngine:
    return sqlalchemy.ext.asyncio.create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        echo=settings.debug
    )


def create_session_maker(
    engine: sqlalchemy.ext.asyncio.AsyncEngine
) -> sqlalchemy.ext.asyncio.async_sessionmaker:
    return sqlalchemy.ext.asyncio.async_sessionmaker(
        engine,
        class_=sqlalchemy.ext.asyncio.AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


async def check_connection(engine: sqlalchemy.ext.asyncio.AsyncEngine) -> None:
    async with engine.connect() as connection:
        await connection.execute(sqlalchemy.text("SELECT 1"))


async def get_db(request: fastapi.Request) -> typing.AsyncIterator[sqlalchemy.ext.asyncio.AsyncSession]:
    async with request.app.state.session_maker() as session:
        try:
            yield session
        finally:
            await session.close()
