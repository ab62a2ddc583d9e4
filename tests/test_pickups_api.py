import pytest
from httpx import AsyncClient

from compost_api.repos import StoreError
from compost_api.repos.inmemory import InMemoryStore

pytestmark = pytest.mark.anyio

async def test_create_pickup(test_client: AsyncClient, store: InMemoryStore, seeded):
    stop_id = seeded["stops"][0]
    r = await test_client.post("/api/pickups", json={
        "stop_id": stop_id, "driver_initials": " jd ", "completed": True, "notes": "  bin by garage  ",
    })
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["stop_id"] == stop_id
    assert data["driver_initials"] == "JD"
    assert data["completed"] is True
    assert data["notes"] == "bin by garage"
    assert data["timestamp"]
    assert list(store.pickup_events) == [data["id"]]

async def test_blank_notes_stored_as_null(test_client: AsyncClient, seeded):
    r = await test_client.post("/api/pickups", json={
        "stop_id": seeded["stops"][0], "driver_initials": "AB", "completed": False, "notes": "   ",
    })
    assert r.status_code == 201, r.text
    assert r.json()["notes"] is None

async def test_legacy_completion_status(test_client: AsyncClient, seeded):
    r = await test_client.post("/api/pickups", json={
        "stop_id": seeded["stops"][0], "driver_initials": "AB", "completion_status": False,
    })
    assert r.status_code == 201, r.text
    assert r.json()["completed"] is False

@pytest.mark.parametrize("body,message", [
    ({"driver_initials": "AB", "completed": True}, "stop_id is required"),
    ({"stop_id": "x", "driver_initials": "AB", "completed": True}, "stop_id must be a positive integer"),
    ({"stop_id": 1, "completed": True}, "driver_initials is required"),
    ({"stop_id": 1, "driver_initials": "AB"}, "completed (or completion_status) is required and must be a boolean"),
    ({"stop_id": 1, "driver_initials": "AB", "completed": "yes"}, "completed (or completion_status) is required and must be a boolean"),
    ({"stop_id": 1, "driver_initials": "A-B", "completed": True}, "driver_initials must be 2-3 alphanumeric characters"),
    ({"stop_id": 1, "driver_initials": "ABCD", "completed": True}, "driver_initials must be 2-3 alphanumeric characters"),
])
async def test_create_pickup_validation(test_client: AsyncClient, store: InMemoryStore, body, message):
    r = await test_client.post("/api/pickups", json=body)
    assert r.status_code == 400, r.text
    assert r.json() == {"error": message}
    assert store.pickup_events == {}

async def test_create_pickup_store_failure(test_client: AsyncClient, store: InMemoryStore, seeded, monkeypatch):
    async def boom(doc):
        raise StoreError("connection reset")
    monkeypatch.setattr(store, "insert_pickup_event", boom)

    r = await test_client.post("/api/pickups", json={"stop_id": 1, "driver_initials": "AB", "completed": True})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to create pickup event"}

async def test_create_pickup_unknown_stop(test_client: AsyncClient, store: InMemoryStore, seeded):
    r = await test_client.post("/api/pickups", json={"stop_id": 9999, "driver_initials": "AB", "completed": True})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid stop ID"}
    assert store.pickup_events == {}

async def test_create_pickup_stop_lookup_failure(test_client: AsyncClient, store: InMemoryStore, seeded, monkeypatch):
    async def boom(stop_id):
        raise StoreError("connection reset")
    monkeypatch.setattr(store, "get_stop", boom)

    r = await test_client.post("/api/pickups", json={"stop_id": 1, "driver_initials": "AB", "completed": True})
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to create pickup event"}
    assert store.pickup_events == {}

async def test_events_are_append_only(test_client: AsyncClient, store: InMemoryStore, seeded):
    stop_id = seeded["stops"][0]
    for completed in (False, True):
        r = await test_client.post("/api/pickups", json={
            "stop_id": stop_id, "driver_initials": "AB", "completed": completed,
        })
        assert r.status_code == 201, r.text
    assert [e["completed"] for e in store.pickup_events.values()] == [False, True]

async def test_health(test_client: AsyncClient):
    r = await test_client.get("/health")
    assert r.json() == {"ok": True}

async def test_unknown_path_uses_error_body(test_client: AsyncClient):
    r = await test_client.get("/api/nope")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}
