from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from compost_api.repos import StoreError
from compost_api.repos.inmemory import InMemoryStore

pytestmark = pytest.mark.anyio

def _at(day: int, hour: int = 9) -> datetime:
    return datetime(2026, 1, day, hour, 0, tzinfo=timezone.utc)

@pytest.fixture
async def history(store: InMemoryStore, seeded):
    s1, s2, s3 = seeded["stops"]
    s4 = seeded["route2_stop"]
    rows = [
        (s1, "SAM", True, _at(5, 8)),
        (s3, "SAM", False, _at(5, 9)),
        (s4, "KIM", True, _at(12, 10)),
        (s4, "KIM", True, _at(12, 23)),
    ]
    for stop_id, initials, completed, ts in rows:
        await store.insert_pickup_event({
            "stop_id": stop_id, "driver_initials": initials, "completed": completed,
            "notes": None, "timestamp": ts,
        })
    return seeded

async def test_events_newest_first_with_context(test_client: AsyncClient, history):
    r = await test_client.get("/api/admin/pickup-events")
    assert r.status_code == 200, r.text
    events = r.json()
    assert [e["id"] for e in events] == [4, 3, 2, 1]

    stop = events[0]["stop"]
    assert stop["id"] == history["route2_stop"]
    assert stop["route_id"] == history["route2_id"]
    assert stop["customer"]["name"] == "Ada Brook"
    assert stop["route"]["driver"] == "Kim"

async def test_events_filter_by_route_before_paging(test_client: AsyncClient, history):
    r = await test_client.get("/api/admin/pickup-events", params={"route_id": history["route_id"], "limit": 1})
    assert r.status_code == 200, r.text
    assert [e["id"] for e in r.json()] == [2]

    r = await test_client.get("/api/admin/pickup-events", params={"route_id": history["route_id"], "offset": 1})
    assert [e["id"] for e in r.json()] == [1]

async def test_events_filter_by_driver_and_completed(test_client: AsyncClient, history):
    r = await test_client.get("/api/admin/pickup-events", params={"driver_initials": "sam"})
    assert [e["id"] for e in r.json()] == [2, 1]

    r = await test_client.get("/api/admin/pickup-events", params={"driver_initials": "sam", "completed": "true"})
    assert [e["id"] for e in r.json()] == [1]

async def test_events_date_to_covers_whole_day(test_client: AsyncClient, history):
    r = await test_client.get("/api/admin/pickup-events", params={"date_to": "2026-01-12"})
    assert [e["id"] for e in r.json()] == [4, 3, 2, 1]

    r = await test_client.get("/api/admin/pickup-events", params={"date_from": "2026-01-06", "date_to": "2026-01-12"})
    assert [e["id"] for e in r.json()] == [4, 3]

    r = await test_client.get("/api/admin/pickup-events", params={"date_to": "2026-01-05"})
    assert [e["id"] for e in r.json()] == [2, 1]

async def test_events_bad_query(test_client: AsyncClient):
    r = await test_client.get("/api/admin/pickup-events", params={"date_from": "yesterday"})
    assert r.status_code == 400
    assert "date_from" in r.json()["error"]

async def test_events_without_context_when_lookup_fails(test_client: AsyncClient, store: InMemoryStore, history, monkeypatch):
    async def boom(ids):
        raise StoreError("timeout")
    monkeypatch.setattr(store, "get_stops", boom)

    r = await test_client.get("/api/admin/pickup-events")
    assert r.status_code == 200, r.text
    assert all(e["stop"] is None for e in r.json())
    assert len(r.json()) == 4

async def test_events_primary_failure(test_client: AsyncClient, store: InMemoryStore, monkeypatch):
    async def boom(**kwargs):
        raise StoreError("timeout")
    monkeypatch.setattr(store, "list_pickup_events", boom)

    r = await test_client.get("/api/admin/pickup-events")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch pickup events"}
