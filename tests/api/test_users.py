"""Profile, account updates, activity ledger and points."""

from __future__ import annotations

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.auth.password import verify_password
from airwalk.db.models import DailyStats, User
from tests.factories import DEFAULT_PASSWORD, create_user


class TestProfile:
    async def test_get_profile(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session, points=30)
        response = await client.get(f"/user/{user.id}")
        assert response.status_code == 200
        profile = response.json()["user"]
        assert profile["username"] == "walker"
        assert profile["points"] == 30
        assert profile["role"] == "walker"
        assert profile["town_hall"]["name"] == "Gandia"
        assert "password_hash" not in profile

    async def test_unknown_user(self, client: AsyncClient):
        response = await client.get("/user/999")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "User not found"}


class TestUpdate:
    async def test_change_username_and_email(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session)
        response = await client.put(f"/user/{user.id}", json={"username": "walker2", "email": "New@Example.com"})
        assert response.status_code == 200

        await db_session.refresh(user)
        assert user.username == "walker2"
        assert user.email == "new@example.com"

    async def test_change_password_requires_current(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session)
        missing = await client.put(f"/user/{user.id}", json={"new_password": "another-pass-2"})
        wrong = await client.put(
            f"/user/{user.id}", json={"current_password": "nope-nope", "new_password": "another-pass-2"}
        )
        assert missing.status_code == 401
        assert wrong.status_code == 401

        ok = await client.put(
            f"/user/{user.id}", json={"current_password": DEFAULT_PASSWORD, "new_password": "another-pass-2"}
        )
        assert ok.status_code == 200
        await db_session.refresh(user)
        assert verify_password("another-pass-2", user.password_hash)

    async def test_username_taken(self, client: AsyncClient, db_session: AsyncSession):
        await create_user(db_session, username="other")
        user = await create_user(db_session)
        response = await client.put(f"/user/{user.id}", json={"username": "other"})
        assert response.status_code == 409

    async def test_nothing_to_update(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session)
        assert (await client.put(f"/user/{user.id}", json={})).status_code == 400
        assert (await client.put(f"/user/{user.id}", json={"username": "walker"})).status_code == 400


class TestActivity:
    async def test_accumulates_totals(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session)
        await client.put("/user/activity", json={"user_id": user.id, "time": 1.5, "distance": 4.0})
        response = await client.put("/user/activity", json={"user_id": user.id, "time": 0.5, "distance": 2.0})
        assert response.status_code == 200
        body = response.json()
        assert body["active_hours"] == 2.0
        assert body["total_distance"] == 6.0

    async def test_negative_values_rejected(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session)
        response = await client.put("/user/activity", json={"user_id": user.id, "time": -1, "distance": 1})
        assert response.status_code == 400

    async def test_daily_stats_appends_ledger_entry(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session)
        response = await client.post(
            "/user/daily-stats",
            json={"user_id": user.id, "active_hours": 1.0, "distance": 3.2, "points": 15},
        )
        assert response.status_code == 201

        rows = (await db_session.execute(select(DailyStats).where(DailyStats.user_id == user.id))).scalars().all()
        assert len(rows) == 1
        assert rows[0].points == 15

    async def test_daily_stats_unknown_user(self, client: AsyncClient):
        response = await client.post("/user/daily-stats", json={"user_id": 999, "points": 1})
        assert response.status_code == 404


class TestPoints:
    async def test_get_and_add(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session, points=10)
        assert (await client.get(f"/points/{user.id}")).json()["points"] == 10

        response = await client.put("/points", json={"user_id": user.id, "points": 25})
        assert response.status_code == 200
        assert response.json()["points"] == 35
        assert (await client.get(f"/points/{user.id}")).json()["points"] == 35

    async def test_non_positive_rejected(self, client: AsyncClient, db_session: AsyncSession):
        user = await create_user(db_session, points=10)
        for value in (0, -5):
            response = await client.put("/points", json={"user_id": user.id, "points": value})
            assert response.status_code == 400
        assert (await client.get(f"/points/{user.id}")).json()["points"] == 10

    async def test_unknown_user(self, client: AsyncClient):
        assert (await client.get("/points/999")).status_code == 404
        assert (await client.put("/points", json={"user_id": 999, "points": 5})).status_code == 404
