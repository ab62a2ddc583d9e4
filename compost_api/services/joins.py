# compost_api/services/joins.py
"""
Join helpers that shape store rows the way the clients expect them.

The store has no relational joins, so related rows are fetched in a second
call and stitched in here. Callers decide whether a failure of that second
call is fatal or should degrade to an empty value.
"""
from typing import Dict, List


async def attach_customers(store, stops: List[dict]) -> List[dict]:
    """Nest `customer` into each stop (None when the customer row is missing)."""
    customers = await store.get_customers(s["customer_id"] for s in stops)
    return [{**s, "customer": customers.get(s["customer_id"])} for s in stops]

async def customer_assignments(store, customer_id: str) -> List[dict]:
    stops = await store.list_stops(customer_id=customer_id)
    routes = await store.get_routes(s["route_id"] for s in stops)
    out = []
    for s in sorted(stops, key=lambda s: (s["route_id"], s["stop_order"]), reverse=True):
        route = routes.get(s["route_id"]) or {}
        out.append({
            "stop_id": s["id"],
            "route_id": s["route_id"],
            "route_date": route.get("date"),
            "route_driver": route.get("driver"),
            "stop_order": s["stop_order"],
            "stop_type": s.get("stop_type"),
        })
    return out

async def attach_event_context(store, events: List[dict]) -> List[dict]:
    """Nest `stop` (with its `customer` and `route`) into each pickup event."""
    stops: Dict[int, dict] = await store.get_stops(e["stop_id"] for e in events)
    customers = await store.get_customers(s["customer_id"] for s in stops.values())
    routes = await store.get_routes(s["route_id"] for s in stops.values())

    out = []
    for e in events:
        stop = stops.get(e["stop_id"])
        if stop is not None:
            stop = {
                "id": stop["id"],
                "stop_order": stop["stop_order"],
                "stop_type": stop.get("stop_type"),
                "route_id": stop["route_id"],
                "customer": customers.get(stop["customer_id"]),
                "route": routes.get(stop["route_id"]),
            }
        out.append({**e, "stop": stop})
    return out
