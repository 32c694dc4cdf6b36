import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret-0123456789abcdefghij")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret-0123456789abcdefghij")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "8")
os.environ.setdefault("ARGON2_PARALLELISM", "1")
os.environ.setdefault("RUN_MIGRATIONS", "false")

import datetime
import pytest
import fastapi.testclient
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession

import tracker_auth.config
import tracker_auth.dependencies
import tracker_auth.main
import tracker_auth.security.passwords
import tracker_auth.security.tokens
from tests.fakes import FakeDatabase, build_fake_services


@pytest.fixture
def mock_session():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def mock_user():
    user = MagicMock()
    user.user_id = 1
    user.username = "ivan"
    user.email = "ivan@x.com"
    user.password_hash = "$argon2id$v=19$m=8,t=1,p=1$fakesalt$fakekey"
    user.role = "user"
    user.created_at = datetime.datetime(2026, 1, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)
    return user


@pytest.fixture
def signer():
    return tracker_auth.security.tokens.TokenSigner.from_settings(tracker_auth.config.settings)


@pytest.fixture
def hasher():
    return tracker_auth.security.passwords.PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def services(fake_db, signer, hasher):
    return build_fake_services(fake_db, signer, hasher)


@pytest.fixture
def token_service(services):
    return services.tokens


@pytest.fixture
def session_service(services):
    return services.sessions


@pytest.fixture
def app(fake_db):
    application = tracker_auth.main.create_app()
    application.dependency_overrides[tracker_auth.dependencies.get_session_service] = (
        lambda: build_fake_services(
            fake_db,
            application.state.token_signer,
            application.state.password_hasher
        ).sessions
    )
    return application


@pytest.fixture
def client(app):
    return fastapi.testclient.TestClient(app)


def make_execute_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    return result
