# compost_client/services/admin.py
import urllib.parse
from typing import Iterable, Optional

from compost_api.utils.validation import parse_positive_id
from compost_client.services.api_client import ApiClient, Result

# ---------- Routes ----------
def fetch_admin_routes(api: ApiClient) -> Result:
    return api.call("GET", "/api/admin/routes")

def fetch_route_for_edit(api: ApiClient, route_id) -> Result:
    rid = parse_positive_id(route_id)
    if rid is None:
        return Result(error="Invalid route ID")
    return api.call("GET", f"/api/admin/routes/{rid}")

def create_route(api: ApiClient, payload: dict) -> Result:
    return api.call("POST", "/api/admin/routes", json=payload)

def update_route(api: ApiClient, route_id, payload: dict) -> Result:
    rid = parse_positive_id(route_id)
    if rid is None:
        return Result(error="Invalid route ID")
    return api.call("PUT", f"/api/admin/routes/{rid}", json=payload)

def delete_route(api: ApiClient, route_id) -> Result:
    rid = parse_positive_id(route_id)
    if rid is None:
        return Result(error="Invalid route ID")
    return api.call("DELETE", f"/api/admin/routes/{rid}")

# ---------- Stops ----------
def create_stop(api: ApiClient, payload: dict) -> Result:
    return api.call("POST", "/api/admin/stops", json=payload)

def update_stop(api: ApiClient, stop_id, payload: dict) -> Result:
    sid = parse_positive_id(stop_id)
    if sid is None:
        return Result(error="Invalid stop ID")
    return api.call("PUT", f"/api/admin/stops/{sid}", json=payload)

def delete_stop(api: ApiClient, stop_id) -> Result:
    sid = parse_positive_id(stop_id)
    if sid is None:
        return Result(error="Invalid stop ID")
    return api.call("DELETE", f"/api/admin/stops/{sid}")

def batch_update_stop_orders(api: ApiClient, updates: Iterable[dict]) -> Result:
    return api.call("POST", "/api/admin/stops/batch", json={"updates": list(updates)})

# ---------- Customers ----------
def fetch_customers(api: ApiClient, search: Optional[str] = None) -> Result:
    term = (search or "").strip() or None
    return api.call("GET", "/api/admin/customers", params={"search": term})

def fetch_customer_by_id(api: ApiClient, customer_id: str) -> Result:
    if not (customer_id or "").strip():
        return Result(error="Customer ID is required")
    return api.call("GET", f"/api/admin/customers/{urllib.parse.quote(customer_id, safe='')}")

# ---------- Pickup history ----------
def fetch_pickup_events(
    api: ApiClient,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    route_id: Optional[int] = None,
    driver_initials: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    completed_only: bool = False,
) -> Result:
    params = {
        "limit": limit or None,
        "offset": offset or None,
        "route_id": route_id or None,
        "driver_initials": driver_initials or None,
        "date_from": date_from or None,
        "date_to": date_to or None,
        "completed": "true" if completed_only else None,
    }
    return api.call("GET", "/api/admin/pickup-events", params=params)
