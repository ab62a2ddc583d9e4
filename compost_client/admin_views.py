# compost_client/admin_views.py
import logging
from typing import Dict, Iterable, List, Optional

from compost_api.schemas import DateSummary
from compost_client.services import admin
from compost_client.services.api_client import ApiClient

logger = logging.getLogger(__name__)

# ---------------- Stop ordering helpers ----------------
def apply_stop_order(stops: List[dict], updates: Iterable[dict]) -> List[dict]:
    """Sort stops by the requested orders (unmentioned stops keep theirs) and renumber 1..n."""
    wanted = {u["stop_id"]: u["stop_order"] for u in updates}
    ordered = sorted(stops, key=lambda s: wanted.get(s["id"], s["stop_order"]))
    return [{**s, "stop_order": i + 1} for i, s in enumerate(ordered)]

def renumber(stops: List[dict]) -> List[dict]:
    return [{**s, "stop_order": i + 1} for i, s in enumerate(stops)]

def order_updates(stops: List[dict]) -> List[dict]:
    return [{"stop_id": s["id"], "stop_order": s["stop_order"]} for s in stops]

def move_updates(stops: List[dict], from_index: int, to_index: int) -> List[dict]:
    """Drag-and-drop: move one stop and return sequential stop_order updates for all."""
    moved = list(stops)
    moved.insert(to_index, moved.pop(from_index))
    return order_updates(renumber(moved))

def unassigned_customers(customers: Iterable[dict], stops: Iterable[dict]) -> List[dict]:
    """Customers that are not already a stop on the route (the add-stop picker)."""
    taken = {s["customer_id"] for s in stops}
    return [c for c in customers if c["stripe_customer_id"] not in taken]

# ---------------- Route editor ----------------
class RouteEditor:
    """
    Edit screen state for one route. Changes are applied locally first; when
    the server rejects one, the local list is replaced by a fresh fetch.
    """

    def __init__(self, api: ApiClient, route_id: int):
        self.api = api
        self.route_id = route_id
        self.route: Optional[dict] = None
        self.stops: List[dict] = []
        self.error: Optional[str] = None

    def load(self) -> bool:
        res = admin.fetch_route_for_edit(self.api, self.route_id)
        if not res.ok:
            self.error = res.error
            self.route = None
            self.stops = []
            return False
        self.error = None
        self.route = {k: v for k, v in res.data.items() if k != "stops"}
        self.stops = res.data.get("stops") or []
        return True

    def customer_choices(self, search: Optional[str] = None) -> List[dict]:
        res = admin.fetch_customers(self.api, search)
        if not res.ok:
            self.error = res.error
            return []
        return unassigned_customers(res.data, self.stops)

    def add_customer(self, customer: dict) -> bool:
        if not unassigned_customers([customer], self.stops):
            self.error = "Customer is already on this route"
            return False
        res = admin.create_stop(self.api, {
            "route_id": self.route_id,
            "customer_id": customer["stripe_customer_id"],
            "stop_order": len(self.stops) + 1,
            "stop_type": "pickup",
            "visible_to_driver": True,
        })
        if not res.ok:
            self.error = res.error
            return False
        self.stops = self.stops + [res.data]
        return True

    def reorder(self, updates: List[dict]) -> bool:
        self.stops = apply_stop_order(self.stops, updates)
        res = admin.batch_update_stop_orders(self.api, updates)
        if not res.ok:
            logger.warning("Reorder of route %s rejected: %s", self.route_id, res.error)
            self.error = res.error
            self._reconcile()
            return False
        return True

    def move(self, from_index: int, to_index: int) -> bool:
        return self.reorder(move_updates(self.stops, from_index, to_index))

    def delete_stop(self, stop_id: int) -> bool:
        res = admin.delete_stop(self.api, stop_id)
        if not res.ok:
            self.error = res.error
            return False

        self.stops = renumber([s for s in self.stops if s["id"] != stop_id])
        if self.stops:
            batch = admin.batch_update_stop_orders(self.api, order_updates(self.stops))
            if not batch.ok:
                self.error = batch.error
                self._reconcile()
                return False
        return True

    def toggle_visibility(self, stop_id: int, visible: bool) -> bool:
        res = admin.update_stop(self.api, stop_id, {"visible_to_driver": visible})
        if not res.ok:
            self.error = res.error
            return False
        self.stops = [{**s, "visible_to_driver": visible} if s["id"] == stop_id else s for s in self.stops]
        return True

    def update_route(self, fields: dict) -> bool:
        res = admin.update_route(self.api, self.route_id, fields)
        if not res.ok:
            self.error = res.error
            return False
        self.route = res.data
        return True

    def _reconcile(self) -> None:
        error = self.error
        self.load()
        # keep the rejection visible over a successful reload
        self.error = error or self.error

# ---------------- Pickup history ----------------
def _event_date(event: dict) -> str:
    return str(event["timestamp"]).split("T")[0]

def summarize_by_date(events: Iterable[dict]) -> List[DateSummary]:
    """Per-day totals for the history screen, newest day first."""
    days: Dict[str, dict] = {}
    for e in events:
        day = days.setdefault(_event_date(e), {"total": 0, "completed": 0, "drivers": set()})
        day["total"] += 1
        if e.get("completed"):
            day["completed"] += 1
        day["drivers"].add(str(e.get("driver_initials", "")).upper())

    return [
        DateSummary(
            date=d,
            total_events=v["total"],
            completed_events=v["completed"],
            pending_events=v["total"] - v["completed"],
            unique_drivers=sorted(v["drivers"]),
        )
        for d, v in sorted(days.items(), reverse=True)
    ]

def events_on(events: Iterable[dict], day: str) -> List[dict]:
    return [e for e in events if _event_date(e) == day]

def latest_event_by_stop(events: Iterable[dict]) -> Dict[int, dict]:
    """A stop's current status is its most recent pickup event."""
    latest: Dict[int, dict] = {}
    for e in events:
        cur = latest.get(e["stop_id"])
        if cur is None or (str(e["timestamp"]), e.get("id", 0)) > (str(cur["timestamp"]), cur.get("id", 0)):
            latest[e["stop_id"]] = e
    return latest
