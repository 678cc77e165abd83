"""Town hall lookup and the application flow."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.config import get_settings
from airwalk.db.models import Application, TownHall, User
from tests.factories import create_application, create_user, town_hall_id


def _form(town_hall: int, **overrides: object) -> dict[str, object]:
    form: dict[str, object] = {
        "first_name": "Ana",
        "last_name": "Diaz",
        "email": "ana@example.com",
        "dni": "12345678Z",
        "phone": "600000000",
        "town_hall_id": town_hall,
    }
    form.update(overrides)
    return form


@pytest.fixture
def auto_register(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("AIRWALK_AUTO_REGISTER_APPLICATIONS", "true")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


async def test_town_halls_alphabetical(client: AsyncClient, db_session: AsyncSession):
    db_session.add(TownHall(name="Alcoy", province="Alicante"))
    await db_session.commit()

    response = await client.get("/getAyuntamientos")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [t["name"] for t in body["data"]] == ["Alcoy", "Gandia"]
    assert set(body["data"][0]) == {"id", "name"}


async def test_apply_stores_application(client: AsyncClient, db_session: AsyncSession):
    response = await client.post("/apply", json=_form(await town_hall_id(db_session), email="Ana@Example.com"))
    assert response.status_code == 201
    application = await db_session.get(Application, response.json()["application_id"])
    assert application.email == "ana@example.com"
    assert application.dni == "12345678Z"


async def test_apply_with_registered_email(client: AsyncClient, db_session: AsyncSession):
    await create_user(db_session, email="ana@example.com")
    response = await client.post("/apply", json=_form(await town_hall_id(db_session)))
    assert response.status_code == 409


async def test_apply_unknown_town_hall(client: AsyncClient):
    response = await client.post("/apply", json=_form(999))
    assert response.status_code == 404
    assert response.json()["message"] == "Town hall not found"


async def test_apply_blank_field(client: AsyncClient, db_session: AsyncSession):
    response = await client.post("/apply", json=_form(await town_hall_id(db_session), phone="   "))
    assert response.status_code == 400
    assert "phone" in response.json()["message"]


async def test_apply_missing_field(client: AsyncClient, db_session: AsyncSession):
    form = _form(await town_hall_id(db_session))
    del form["dni"]
    response = await client.post("/apply", json=form)
    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_delete_application(client: AsyncClient, db_session: AsyncSession):
    application_id = (await create_application(db_session)).id
    response = await client.delete(f"/application/{application_id}")
    assert response.status_code == 200

    remaining = (await db_session.execute(select(Application))).scalars().all()
    assert remaining == []
    assert (await client.delete(f"/application/{application_id}")).status_code == 404


async def test_auto_register_creates_account(
    auto_register: None, client: AsyncClient, db_session: AsyncSession, mock_email_service
):
    response = await client.post("/apply", json=_form(await town_hall_id(db_session)))
    assert response.status_code == 201

    user = (await db_session.execute(select(User).where(User.email == "ana@example.com"))).scalar_one()
    assert user.username == "a.diaz"
    assert (await db_session.execute(select(Application))).scalars().all() == []
    mock_email_service.send_template.assert_awaited_once()
