# tests/conftest.py
import asyncio
import os

# settings are read at import time
os.environ["USE_MONGO"] = "0"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from asgi_lifespan import LifespanManager
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from compost_api.deps import get_store
from compost_api.main import app
from compost_api.repos.inmemory import InMemoryStore
from compost_client.services.api_client import ApiClient

CUSTOMERS = [
    {"stripe_customer_id": "cus_1", "name": "Ada Brook", "phone": "5405551234",
     "address": "100 Caroline St", "status": "active", "notes": {"gate": "blue"}},
    {"stripe_customer_id": "cus_2", "name": "Ben Carter", "phone": "15405559876",
     "address": "212 William St", "status": "active"},
    {"stripe_customer_id": "cus_3", "name": "Cora Diaz", "address": "7 Hanover St", "status": "paused"},
]

async def seed(store: InMemoryStore) -> dict:
    for c in CUSTOMERS:
        await store.insert_customer(c)

    r1 = await store.insert_route({"date": "2026-01-05", "driver": "Sam", "notes": {}})
    r2 = await store.insert_route({"date": "2026-01-12", "driver": "Kim", "notes": {}})

    def stop(route_id, customer_id, order, visible=True):
        return {
            "route_id": route_id, "customer_id": customer_id, "stop_order": order,
            "stop_type": "pickup", "visible_to_driver": visible, "flags": "", "flag_notes": "",
        }

    s1 = await store.insert_stop(stop(r1["id"], "cus_1", 1))
    s2 = await store.insert_stop(stop(r1["id"], "cus_2", 2, visible=False))
    s3 = await store.insert_stop(stop(r1["id"], "cus_3", 3))
    s4 = await store.insert_stop(stop(r2["id"], "cus_1", 1))
    return {
        "route_id": r1["id"],
        "route2_id": r2["id"],
        "stops": [s1["id"], s2["id"], s3["id"]],
        "route2_stop": s4["id"],
    }

@pytest.fixture(scope="session")
def anyio_backend():
    # keep AnyIO on asyncio for the whole test session
    return "asyncio"

@pytest.fixture
def store():
    s = InMemoryStore()
    app.dependency_overrides[get_store] = lambda: s
    yield s
    app.dependency_overrides.pop(get_store, None)

@pytest.fixture
async def seeded(store):
    return await seed(store)

@pytest.fixture
def seeded_sync(store):
    return asyncio.run(seed(store))

@pytest.fixture
async def test_client(store):
    async with LifespanManager(app):
        transport = ASGITransport(app=app, raise_app_exceptions=True)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

@pytest.fixture
def api(store):
    """Real client code talking to the app in-process."""
    with TestClient(app) as tc:
        yield ApiClient("http://testserver", session=tc)
