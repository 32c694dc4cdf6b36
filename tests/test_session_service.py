import asyncio
import asyncpg
import pytest
import sqlalchemy.exc
import tracker_auth.errors
import tracker_auth.services.session_service

RegisterInput = tracker_auth.services.session_service.RegisterInput
LoginInput = tracker_auth.services.session_service.LoginInput

META = tracker_auth.services.session_service.RequestMeta(ip="127.0.0.1", user_agent="pytest")


def ivan():
    return RegisterInput(username="ivan", email="ivan@x.com", password="pw12345678")


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_creates_user_with_user_role(self, session_service, fake_db, signer):
        session = await session_service.register(ivan(), META)

        assert session.user.username == "ivan"
        assert session.user.role == "user"
        assert signer.verify_access(session.access_token).role == "user"
        assert len(fake_db.tokens_for(session.user.user_id)) == 1

    @pytest.mark.asyncio
    async def test_register_stores_argon2_verifier(self, session_service, fake_db):
        session = await session_service.register(ivan(), META)

        stored = fake_db.users[session.user.user_id].password_hash
        assert stored.startswith("$argon2id$")
        assert "pw12345678" not in stored

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, session_service):
        await session_service.register(ivan(), META)

        with pytest.raises(tracker_auth.errors.Conflict):
            await session_service.register(
                RegisterInput(username="ivan2", email="ivan@x.com", password="pw12345678"),
                META
            )

    @pytest.mark.asyncio
    async def test_register_duplicate_username(self, session_service):
        await session_service.register(ivan(), META)

        with pytest.raises(tracker_auth.errors.Conflict):
            await session_service.register(
                RegisterInput(username="ivan", email="other@x.com", password="pw12345678"),
                META
            )


class TestLogin:
    @pytest.mark.asyncio
    async def test_register_login_refresh_then_old_token_rejected(self, session_service):
        registered = await session_service.register(ivan(), META)

        logged_in = await session_service.login(
            LoginInput(email="ivan@x.com", password="pw12345678"),
            META
        )
        assert logged_in.user.user_id == registered.user.user_id

        refreshed = await session_service.refresh(logged_in.refresh_token, META)
        assert refreshed.refresh_token != logged_in.refresh_token

        with pytest.raises(tracker_auth.errors.Unauthorized):
            await session_service.refresh(logged_in.refresh_token, META)

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(self, session_service):
        await session_service.register(ivan(), META)

        with pytest.raises(tracker_auth.errors.Unauthorized) as wrong_password:
            await session_service.login(
                LoginInput(email="ivan@x.com", password="wrong-password"),
                META
            )
        with pytest.raises(tracker_auth.errors.Unauthorized) as unknown_email:
            await session_service.login(
                LoginInput(email="nobody@x.com", password="pw12345678"),
                META
            )

        assert wrong_password.value.message == unknown_email.value.message
        assert wrong_password.value.message == tracker_auth.services.session_service.INVALID_CREDENTIALS_MESSAGE
        assert wrong_password.value.reason == "password_mismatch"
        assert unknown_email.value.reason == "unknown_email"

    @pytest.mark.asyncio
    async def test_unknown_email_still_runs_password_kdf(self, session_service, hasher, mocker):
        verify = mocker.spy(hasher, "verify")

        with pytest.raises(tracker_auth.errors.Unauthorized):
            await session_service.login(LoginInput(email="nobody@x.com", password="pw12345678"), META)

        verify.assert_called_once()
        assert verify.call_args[0][0] == "pw12345678"
        assert verify.call_args[0][1].startswith("$argon2id$")

    @pytest.mark.asyncio
    async def test_each_login_is_a_separate_session(self, session_service, fake_db):
        registered = await session_service.register(ivan(), META)
        credentials = LoginInput(email="ivan@x.com", password="pw12345678")

        first = await session_service.login(credentials, META)
        second = await session_service.login(credentials, META)

        assert first.refresh_token != second.refresh_token
        assert len(fake_db.tokens_for(registered.user.user_id)) == 3


class TestRefresh:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [None, ""])
    async def test_missing_refresh_token(self, session_service, token):
        with pytest.raises(tracker_auth.errors.Unauthorized) as exc_info:
            await session_service.refresh(token, META)

        assert exc_info.value.reason == "missing"


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_revokes_token(self, session_service, fake_db):
        session = await session_service.register(ivan(), META)

        await session_service.logout(session.refresh_token)

        assert all(t.revoked_at is not None for t in fake_db.tokens_for(session.user.user_id))

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        sqlalchemy.exc.OperationalError("UPDATE", {}, Exception("down")),
        ConnectionRefusedError(111, "Connect call failed"),
        OSError("Network is unreachable"),
        asyncpg.InterfaceError("connection is closed"),
        asyncio.TimeoutError(),
    ])
    async def test_logout_swallows_storage_errors(self, session_service, mocker, caplog, error):
        mocker.patch.object(session_service._tokens, "logout", mocker.AsyncMock(side_effect=error))

        await session_service.logout("anything")

        assert "Failed to revoke refresh token on logout" in caplog.text

    @pytest.mark.asyncio
    async def test_logout_does_not_hide_programming_errors(self, session_service, mocker):
        mocker.patch.object(session_service._tokens, "logout", mocker.AsyncMock(side_effect=RuntimeError("bug")))

        with pytest.raises(RuntimeError):
            await session_service.logout("anything")


class TestUsers:
    @pytest.mark.asyncio
    async def test_get_user_not_found(self, session_service):
        with pytest.raises(tracker_auth.errors.NotFound):
            await session_service.get_user(999)

    @pytest.mark.asyncio
    async def test_list_users_pages(self, session_service):
        for index in range(3):
            await session_service.register(
                RegisterInput(
                    username=f"user_{index}",
                    email=f"user{index}@x.com",
                    password="pw12345678"
                ),
                META
            )

        users, total = await session_service.list_users(limit=2, offset=1)

        assert total == 3
        assert [u.username for u in users] == ["user_1", "user_2"]

    @pytest.mark.asyncio
    async def test_revoke_sessions(self, session_service, fake_db):
        session = await session_service.register(ivan(), META)

        revoked = await session_service.revoke_sessions(session.user.user_id)

        assert revoked == 1
        with pytest.raises(tracker_auth.errors.Unauthorized):
            await session_service.refresh(session.refresh_token, META)

    @pytest.mark.asyncio
    async def test_revoke_sessions_unknown_user(self, session_service):
        with pytest.raises(tracker_auth.errors.NotFound):
            await session_service.revoke_sessions(999)
