"""Registration, login and password recovery."""

from __future__ import annotations

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.auth.jwt import create_access_token
from airwalk.auth.service import authenticate_user
from airwalk.db.models import Application, User
from airwalk.errors import AuthError, LockedError
from tests.factories import DEFAULT_PASSWORD, create_application, create_user


class FakeRedis:
    """Just enough of the redis client for the login lockout counters."""

    def __init__(self) -> None:
        self.data: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        value = self.data.get(key)
        return None if value is None else str(value)

    async def incr(self, key: str) -> int:
        self.data[key] = self.data.get(key, 0) + 1
        return self.data[key]

    async def expire(self, key: str, seconds: int) -> bool:
        return key in self.data

    async def delete(self, key: str) -> int:
        return 1 if self.data.pop(key, None) is not None else 0


class TestRegisterFromApplication:
    async def test_register_then_login_with_derived_credentials(
        self, client: AsyncClient, db_session: AsyncSession, mock_email_service
    ):
        await create_application(db_session, first_name="Ana", last_name="Diaz", email="e@x.com", dni="12345678Z")

        response = await client.post("/register", json={"email": "e@x.com"})
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["username"] == "a.diaz"

        response = await client.post("/login", json={"username": "a.diaz", "password": "12345678"})
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["token"]
        assert data["user_id"] > 0

    async def test_welcome_email_carries_credentials(
        self, client: AsyncClient, db_session: AsyncSession, mock_email_service
    ):
        await create_application(db_session)
        await client.post("/register", json={"email": "e@x.com"})

        mock_email_service.send_template.assert_awaited_once()
        kwargs = mock_email_service.send_template.call_args.kwargs
        assert kwargs["to"] == "e@x.com"
        assert kwargs["template_name"] == "welcome"
        assert kwargs["context"] == {"first_name": "Ana", "username": "a.diaz", "password": "12345678"}

    async def test_application_is_consumed(self, client: AsyncClient, db_session: AsyncSession):
        await create_application(db_session)
        await client.post("/register", json={"email": "e@x.com"})

        remaining = (await db_session.execute(select(func.count()).select_from(Application))).scalar_one()
        assert remaining == 0

    async def test_new_user_has_walker_role_and_zero_totals(self, client: AsyncClient, db_session: AsyncSession):
        await create_application(db_session)
        user_id = (await client.post("/register", json={"email": "e@x.com"})).json()["user_id"]

        profile = (await client.get(f"/user/{user_id}")).json()["user"]
        assert profile["role"] == "walker"
        assert profile["points"] == 0
        assert profile["active_hours"] == 0
        assert profile["total_distance"] == 0
        assert profile["town_hall"]["name"] == "Gandia"

    async def test_username_collision_gets_suffix(self, client: AsyncClient, db_session: AsyncSession):
        await create_application(db_session, email="first@x.com")
        await create_application(db_session, email="second@x.com")

        first = (await client.post("/register", json={"email": "first@x.com"})).json()
        second = (await client.post("/register", json={"email": "second@x.com"})).json()
        assert first["username"] == "a.diaz"
        assert second["username"] == "a.diaz2"

    async def test_no_application(self, client: AsyncClient):
        response = await client.post("/register", json={"email": "nobody@x.com"})
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "No application found for that email"}

    async def test_email_already_registered(self, client: AsyncClient, db_session: AsyncSession):
        await create_user(db_session, username="taken", email="e@x.com")
        await create_application(db_session, email="e@x.com")
        response = await client.post("/register", json={"email": "e@x.com"})
        assert response.status_code == 409

    async def test_email_failure_does_not_undo_registration(
        self, client: AsyncClient, db_session: AsyncSession, mock_email_service
    ):
        mock_email_service.send_template.side_effect = RuntimeError("smtp down")
        await create_application(db_session)
        response = await client.post("/register", json={"email": "e@x.com"})
        assert response.status_code == 201


class TestDirectRegistration:
    async def test_register_with_credentials(self, client: AsyncClient):
        response = await client.post(
            "/register",
            json={"email": "Walker@Example.com", "username": "walker1", "password": "secret-pass"},
        )
        assert response.status_code == 201
        assert response.json()["username"] == "walker1"

        response = await client.post("/login", json={"username": "walker@example.com", "password": "secret-pass"})
        assert response.status_code == 200

    async def test_duplicate_username(self, client: AsyncClient, db_session: AsyncSession):
        await create_user(db_session, username="walker1")
        response = await client.post(
            "/register", json={"email": "other@example.com", "username": "walker1", "password": "secret-pass"}
        )
        assert response.status_code == 409
        assert response.json()["success"] is False

    async def test_weak_password(self, client: AsyncClient):
        response = await client.post(
            "/register", json={"email": "w@example.com", "username": "walker1", "password": "abc"}
        )
        assert response.status_code == 400
        assert "password" in response.json()["message"].lower()

    async def test_username_without_password(self, client: AsyncClient):
        response = await client.post("/register", json={"email": "w@example.com", "username": "walker1"})
        assert response.status_code == 400

    async def test_invalid_email(self, client: AsyncClient):
        response = await client.post("/register", json={"email": "not-an-email"})
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestLogin:
    async def test_wrong_password(self, client: AsyncClient, db_session: AsyncSession):
        await create_user(db_session, username="walker")
        response = await client.post("/login", json={"username": "walker", "password": "wrong-one"})
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid username or password"}

    async def test_unknown_user_same_message(self, client: AsyncClient):
        response = await client.post("/login", json={"username": "ghost", "password": "whatever"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid username or password"

    async def test_login_updates_counters(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session, username="walker")
        await client.post("/login", json={"username": "walker", "password": DEFAULT_PASSWORD})

        await db_session.refresh(user)
        assert user.login_count == 1
        assert user.last_login is not None

    async def test_missing_fields(self, client: AsyncClient):
        response = await client.post("/login", json={"username": "walker"})
        assert response.status_code == 400


class TestCurrentUser:
    async def test_token_from_login_resolves_profile(self, client: AsyncClient, db_session: AsyncSession):
        await create_user(db_session, username="walker")
        login = await client.post("/login", json={"username": "walker", "password": DEFAULT_PASSWORD})
        token = login.json()["token"]

        response = await client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "walker"

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/me")
        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Missing bearer token"}

    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/me", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_token_of_unknown_user(self, client: AsyncClient):
        response = await client.get("/me", headers={"Authorization": f"Bearer {create_access_token(999, 'ghost')}"})
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"


class TestLockout:
    async def test_account_locks_after_repeated_failures(self, db_session: AsyncSession):
        await create_user(db_session, username="walker")
        redis = FakeRedis()

        for _ in range(10):
            with pytest.raises(AuthError):
                await authenticate_user(db_session, redis, "walker", "wrong-one")

        with pytest.raises(LockedError):
            await authenticate_user(db_session, redis, "walker", DEFAULT_PASSWORD)

    async def test_success_clears_counter(self, db_session: AsyncSession):
        user = await create_user(db_session, username="walker")
        redis = FakeRedis()

        with pytest.raises(AuthError):
            await authenticate_user(db_session, redis, "walker", "wrong-one")
        assert redis.data[f"login_attempts:{user.id}"] == 1

        await authenticate_user(db_session, redis, "walker", DEFAULT_PASSWORD)
        assert f"login_attempts:{user.id}" not in redis.data


class TestRecover:
    async def test_unknown_email_looks_like_success(self, client: AsyncClient, mock_email_service):
        response = await client.post("/recover", json={"email": "nobody@example.com"})
        assert response.status_code == 200
        assert response.json()["success"] is True
        mock_email_service.send_template.assert_not_called()

    async def test_same_answer_for_known_email(
        self, client: AsyncClient, db_session: AsyncSession, mock_email_service
    ):
        await create_user(db_session, username="walker", email="walker@example.com")
        known = await client.post("/recover", json={"email": "walker@example.com"})
        unknown = await client.post("/recover", json={"email": "nobody@example.com"})
        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()

    async def test_temporary_password_replaces_old_one(
        self, client: AsyncClient, db_session: AsyncSession, mock_email_service
    ):
        await create_user(db_session, username="walker", email="walker@example.com")
        await client.post("/recover", json={"email": "walker@example.com"})

        kwargs = mock_email_service.send_template.call_args.kwargs
        assert kwargs["template_name"] == "temporary_password"
        temp = kwargs["context"]["password"]

        old = await client.post("/login", json={"username": "walker", "password": DEFAULT_PASSWORD})
        new = await client.post("/login", json={"username": "walker", "password": temp})
        assert old.status_code == 401
        assert new.status_code == 200
