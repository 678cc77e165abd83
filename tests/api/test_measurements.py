"""Measurement ingestion, listing, nearest lookup and synthetic data."""

from __future__ import annotations

from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from airwalk.db.models import Measurement
from airwalk.measurements.fake import GANDIA_CENTRE
from tests.factories import add_measurements, create_node


class TestInsert:
    async def test_insert_and_list(self, client: AsyncClient, db_session: AsyncSession):
        node = await create_node(db_session, "beacon-1")
        response = await client.post(
            "/measurements",
            json={
                "node_id": node.id,
                "co_value": 0.4,
                "o3_value": 42.0,
                "no2_value": 18.5,
                "latitude": 38.97,
                "longitude": -0.18,
            },
        )
        assert response.status_code == 201
        measurement_id = response.json()["measurement_id"]

        listed = (await client.get("/measurements")).json()["measurements"]
        assert [m["id"] for m in listed] == [measurement_id]
        assert listed[0]["o3_value"] == 42.0
        assert listed[0]["node_id"] == node.id

    async def test_unknown_node(self, client: AsyncClient):
        response = await client.post("/measurements", json={"node_id": 999, "co_value": 1.0})
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Node not found"}

    async def test_coordinates_out_of_range(self, client: AsyncClient, db_session: AsyncSession):
        node = await create_node(db_session, "beacon-1")
        response = await client.post("/measurements", json={"node_id": node.id, "latitude": 123.0})
        assert response.status_code == 400


class TestNearest:
    async def test_returns_closest_readings(self, client: AsyncClient, db_session: AsyncSession):
        node = await create_node(db_session, "beacon-1")
        await add_measurements(db_session, node.id, [(0.4, 10.0, 11.0)], latitude=39.47, longitude=-0.376)
        await add_measurements(db_session, node.id, [(0.4, 20.0, 21.0)], latitude=38.97, longitude=-0.18)
        await add_measurements(db_session, node.id, [(0.4, 30.0, 31.0)], latitude=40.41, longitude=-3.70)
        await add_measurements(db_session, node.id, [(0.4, 99.0, 99.0)])

        response = await client.get("/measurements/closest/38.971/-0.181")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["o3_value"] == 20.0
        assert data["no2_value"] == 21.0
        assert data["distance_km"] < 1.0

    async def test_no_measurements(self, client: AsyncClient):
        response = await client.get("/measurements/closest/38.97/-0.18")
        assert response.status_code == 404

    async def test_invalid_coordinates(self, client: AsyncClient):
        for path in ("/measurements/closest/abc/-0.18", "/measurements/closest/nan/1", "/measurements/closest/95/0"):
            response = await client.get(path)
            assert response.status_code == 400, path
            assert response.json()["success"] is False


class TestFake:
    async def test_generates_requested_count_inside_area(self, client: AsyncClient, db_session: AsyncSession):
        node = await create_node(db_session, "beacon-1")
        response = await client.post("/measurements/fake", json={"node_id": node.id, "count": 20})
        assert response.status_code == 201
        generated = response.json()["measurements"]
        assert len(generated) == 20

        bounds = GANDIA_CENTRE.bounds
        for m in generated:
            assert bounds[1] <= m["latitude"] <= bounds[3]
            assert bounds[0] <= m["longitude"] <= bounds[2]

        stored = (await db_session.execute(select(func.count()).select_from(Measurement))).scalar_one()
        assert stored == 20

    async def test_count_bounds(self, client: AsyncClient, db_session: AsyncSession):
        node = await create_node(db_session, "beacon-1")
        assert (await client.post("/measurements/fake", json={"node_id": node.id, "count": 0})).status_code == 400
        assert (await client.post("/measurements/fake", json={"node_id": node.id, "count": 5000})).status_code == 400

    async def test_unknown_node(self, client: AsyncClient):
        response = await client.post("/measurements/fake", json={"node_id": 999, "count": 5})
        assert response.status_code == 404
