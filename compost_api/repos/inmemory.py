# compost_api/repos/inmemory.py
import copy
import itertools
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _copy(doc: Optional[dict]) -> Optional[dict]:
    return copy.deepcopy(doc) if doc is not None else None

def _matches(value: Optional[str], needle: str) -> bool:
    return needle in (value or "").lower()

class InMemoryStore:
    """Dict-backed store with the same async surface as MongoStore."""

    def __init__(self):
        self.customers: Dict[str, dict] = {}
        self.routes: Dict[int, dict] = {}
        self.stops: Dict[int, dict] = {}
        self.pickup_events: Dict[int, dict] = {}
        self._route_seq = itertools.count(1)
        self._stop_seq = itertools.count(1)
        self._event_seq = itertools.count(1)

    async def ensure_indexes(self) -> None:
        return None

    def close(self) -> None:
        return None

    # Customers
    async def insert_customer(self, doc: dict) -> dict:
        doc = dict(doc)
        self.customers[doc["stripe_customer_id"]] = doc
        return _copy(doc)

    async def list_customers(self, search: Optional[str] = None) -> List[dict]:
        vals = list(self.customers.values())
        if search:
            needle = search.lower()
            vals = [
                c for c in vals
                if _matches(c.get("name"), needle)
                or _matches(c.get("address"), needle)
                or _matches(c.get("phone"), needle)
            ]
        vals.sort(key=lambda c: c.get("name") or "")
        return [_copy(c) for c in vals]

    async def get_customer(self, customer_id: str) -> Optional[dict]:
        return _copy(self.customers.get(customer_id))

    async def get_customers(self, customer_ids: Iterable[str]) -> Dict[str, dict]:
        return {cid: _copy(self.customers[cid]) for cid in set(customer_ids) if cid in self.customers}

    # Routes
    async def list_routes(self, order_by: str = "date") -> List[dict]:
        vals = list(self.routes.values())
        if order_by == "id":
            vals.sort(key=lambda r: r["id"], reverse=True)
        else:
            # routes without a date go last
            vals.sort(key=lambda r: (r.get("date") is not None, r.get("date") or ""), reverse=True)
        return [_copy(r) for r in vals]

    async def get_route(self, route_id: int) -> Optional[dict]:
        return _copy(self.routes.get(route_id))

    async def get_routes(self, route_ids: Iterable[int]) -> Dict[int, dict]:
        return {rid: _copy(self.routes[rid]) for rid in set(route_ids) if rid in self.routes}

    async def insert_route(self, doc: dict) -> dict:
        rid = next(self._route_seq)
        doc = {**doc, "id": rid}
        self.routes[rid] = doc
        return _copy(doc)

    async def update_route(self, route_id: int, fields: dict) -> Optional[dict]:
        if route_id not in self.routes:
            return None
        self.routes[route_id].update(fields)
        return _copy(self.routes[route_id])

    async def delete_route(self, route_id: int) -> bool:
        return self.routes.pop(route_id, None) is not None

    # Stops
    async def list_stops(
        self,
        route_id: Optional[int] = None,
        customer_id: Optional[str] = None,
        visible_only: bool = False,
    ) -> List[dict]:
        vals = list(self.stops.values())
        if route_id is not None:
            vals = [s for s in vals if s["route_id"] == route_id]
        if customer_id is not None:
            vals = [s for s in vals if s["customer_id"] == customer_id]
        if visible_only:
            vals = [s for s in vals if s.get("visible_to_driver")]
        vals.sort(key=lambda s: (s["route_id"], s["stop_order"]))
        return [_copy(s) for s in vals]

    async def count_stops(self, route_ids: Iterable[int]) -> Dict[int, int]:
        wanted = set(route_ids)
        counts: Dict[int, int] = {}
        for s in self.stops.values():
            if s["route_id"] in wanted:
                counts[s["route_id"]] = counts.get(s["route_id"], 0) + 1
        return counts

    async def get_stop(self, stop_id: int) -> Optional[dict]:
        return _copy(self.stops.get(stop_id))

    async def get_stops(self, stop_ids: Iterable[int]) -> Dict[int, dict]:
        return {sid: _copy(self.stops[sid]) for sid in set(stop_ids) if sid in self.stops}

    async def insert_stop(self, doc: dict) -> dict:
        sid = next(self._stop_seq)
        doc = {**doc, "id": sid}
        self.stops[sid] = doc
        return _copy(doc)

    async def update_stop(self, stop_id: int, fields: dict) -> Optional[dict]:
        if stop_id not in self.stops:
            return None
        self.stops[stop_id].update(fields)
        return _copy(self.stops[stop_id])

    async def delete_stop(self, stop_id: int) -> bool:
        return self.stops.pop(stop_id, None) is not None

    async def delete_stops_for_route(self, route_id: int) -> int:
        doomed = [sid for sid, s in self.stops.items() if s["route_id"] == route_id]
        for sid in doomed:
            del self.stops[sid]
        return len(doomed)

    # Pickup events (append-only)
    async def insert_pickup_event(self, doc: dict) -> dict:
        eid = next(self._event_seq)
        doc = {**doc, "id": eid}
        doc.setdefault("timestamp", _utcnow())
        self.pickup_events[eid] = doc
        return _copy(doc)

    async def list_pickup_events(
        self,
        completed: Optional[bool] = None,
        driver_initials: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_before: Optional[datetime] = None,
        stop_ids: Optional[Iterable[int]] = None,
        offset: int = 0,
        limit: int = 100,
    ) -> List[dict]:
        vals = list(self.pickup_events.values())
        if completed is not None:
            vals = [e for e in vals if e["completed"] == completed]
        if driver_initials:
            needle = driver_initials.lower()
            vals = [e for e in vals if _matches(e.get("driver_initials"), needle)]
        if date_from is not None:
            vals = [e for e in vals if e["timestamp"] >= date_from]
        if date_before is not None:
            vals = [e for e in vals if e["timestamp"] < date_before]
        if stop_ids is not None:
            wanted = set(stop_ids)
            vals = [e for e in vals if e["stop_id"] in wanted]
        vals.sort(key=lambda e: (e["timestamp"], e["id"]), reverse=True)
        return [_copy(e) for e in vals[offset:offset + limit]]
