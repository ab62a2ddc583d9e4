import pytest
from httpx import AsyncClient

from compost_api.repos import StoreError
from compost_api.repos.inmemory import InMemoryStore

pytestmark = pytest.mark.anyio

async def test_route_stops_visible_only_in_order(test_client: AsyncClient, store: InMemoryStore, seeded):
    s1, s2, s3 = seeded["stops"]
    # shuffle orders so insertion order differs from run order
    await store.update_stop(s1, {"stop_order": 3})
    await store.update_stop(s3, {"stop_order": 1})

    r = await test_client.get(f"/api/routes/{seeded['route_id']}")
    assert r.status_code == 200, r.text
    stops = r.json()
    assert [s["id"] for s in stops] == [s3, s1]
    assert stops[0]["customer"]["name"] == "Cora Diaz"
    assert stops[1]["customer"]["phone"] == "5405551234"

@pytest.mark.parametrize("route_id", ["abc", "0", "-1"])
async def test_route_stops_invalid_id(test_client: AsyncClient, route_id):
    r = await test_client.get(f"/api/routes/{route_id}")
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid route ID"}

async def test_route_stops_unknown_route_is_empty(test_client: AsyncClient, seeded):
    r = await test_client.get("/api/routes/999")
    assert r.status_code == 200
    assert r.json() == []

async def test_route_stops_store_failure(test_client: AsyncClient, store: InMemoryStore, monkeypatch):
    async def boom(**kwargs):
        raise StoreError("timeout")
    monkeypatch.setattr(store, "list_stops", boom)

    r = await test_client.get("/api/routes/1")
    assert r.status_code == 500
    assert r.json() == {"error": "Failed to fetch stops"}

async def test_list_routes_newest_first(test_client: AsyncClient, seeded):
    r = await test_client.get("/api/routes")
    assert r.status_code == 200, r.text
    assert [x["id"] for x in r.json()] == [seeded["route2_id"], seeded["route_id"]]
