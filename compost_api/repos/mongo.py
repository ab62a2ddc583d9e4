# compost_api/repos/mongo.py
import functools
import logging
import re
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from compost_api.repos import StoreError

logger = logging.getLogger(__name__)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _wrap_errors(fn):
    @functools.wraps(fn)
    async def inner(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except PyMongoError as ex:
            logger.error("mongo %s failed: %s", fn.__name__, ex)
            raise StoreError(str(ex)) from ex
    return inner

def _out(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    doc["id"] = doc.pop("_id")
    return doc

def _customer_out(doc: Optional[dict]) -> Optional[dict]:
    if doc is None:
        return None
    doc["stripe_customer_id"] = doc.pop("_id")
    return doc

def _like(term: str) -> dict:
    return {"$regex": re.escape(term), "$options": "i"}

class MongoStore:
    """
    Tables live in collections keyed by `_id`:
      - customers: `_id` is the billing id (stripe_customer_id)
      - routes/stops/pickup_events: integer `_id` drawn from `counters`
    Documents leave the store with `id` (or `stripe_customer_id`) instead of `_id`.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def _next_id(self, name: str) -> int:
        doc = await self.db.counters.find_one_and_update(
            {"_id": name},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return int(doc["seq"])

    @_wrap_errors
    async def ensure_indexes(self) -> None:
        async def ensure_index(col, keys, name: str, **kwargs):
            existing = [ix["name"] async for ix in col.list_indexes()]
            if name in existing:
                return
            await col.create_index(keys, name=name, **kwargs)

        await ensure_index(self.db.stops, [("route_id", ASCENDING), ("stop_order", ASCENDING)], "route_order_1")
        await ensure_index(self.db.stops, [("customer_id", ASCENDING)], "customer_id_1")
        await ensure_index(self.db.pickup_events, [("timestamp", DESCENDING)], "timestamp_-1")
        await ensure_index(self.db.pickup_events, [("stop_id", ASCENDING)], "stop_id_1")
        await ensure_index(self.db.customers, [("name", ASCENDING)], "name_1")

    def close(self) -> None:
        self.db.client.close()

    # Customers
    @_wrap_errors
    async def insert_customer(self, doc: dict) -> dict:
        doc = dict(doc)
        doc["_id"] = doc.pop("stripe_customer_id")
        await self.db.customers.replace_one({"_id": doc["_id"]}, doc, upsert=True)
        return _customer_out(doc)

    @_wrap_errors
    async def list_customers(self, search: Optional[str] = None) -> List[dict]:
        query: dict = {}
        if search:
            query = {"$or": [{"name": _like(search)}, {"address": _like(search)}, {"phone": _like(search)}]}
        cur = self.db.customers.find(query).sort("name", ASCENDING)
        return [_customer_out(c) async for c in cur]

    @_wrap_errors
    async def get_customer(self, customer_id: str) -> Optional[dict]:
        return _customer_out(await self.db.customers.find_one({"_id": customer_id}))

    @_wrap_errors
    async def get_customers(self, customer_ids: Iterable[str]) -> Dict[str, dict]:
        cur = self.db.customers.find({"_id": {"$in": list(set(customer_ids))}})
        out: Dict[str, dict] = {}
        async for c in cur:
            c = _customer_out(c)
            out[c["stripe_customer_id"]] = c
        return out

    # Routes
    @_wrap_errors
    async def list_routes(self, order_by: str = "date") -> List[dict]:
        key = "_id" if order_by == "id" else "date"
        cur = self.db.routes.find().sort(key, DESCENDING)
        return [_out(r) async for r in cur]

    @_wrap_errors
    async def get_route(self, route_id: int) -> Optional[dict]:
        return _out(await self.db.routes.find_one({"_id": route_id}))

    @_wrap_errors
    async def get_routes(self, route_ids: Iterable[int]) -> Dict[int, dict]:
        cur = self.db.routes.find({"_id": {"$in": list(set(route_ids))}})
        out: Dict[int, dict] = {}
        async for r in cur:
            r = _out(r)
            out[r["id"]] = r
        return out

    @_wrap_errors
    async def insert_route(self, doc: dict) -> dict:
        doc = {**doc, "_id": await self._next_id("routes")}
        await self.db.routes.insert_one(doc)
        return _out(doc)

    @_wrap_errors
    async def update_route(self, route_id: int, fields: dict) -> Optional[dict]:
        doc = await self.db.routes.find_one_and_update(
            {"_id": route_id}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return _out(doc)

    @_wrap_errors
    async def delete_route(self, route_id: int) -> bool:
        res = await self.db.routes.delete_one({"_id": route_id})
        return res.deleted_count > 0

    # Stops
    @_wrap_errors
    async def list_stops(
        self,
        route_id: Optional[int] = None,
        customer_id: Optional[str] = None,
        visible_only: bool = False,
    ) -> List[dict]:
        query: dict = {}
        if route_id is not None:
            query["route_id"] = route_id
        if customer_id is not None:
            query["customer_id"] = customer_id
        if visible_only:
            query["visible_to_driver"] = True
        cur = self.db.stops.find(query).sort([("route_id", ASCENDING), ("stop_order", ASCENDING)])
        return [_out(s) async for s in cur]

    @_wrap_errors
    async def count_stops(self, route_ids: Iterable[int]) -> Dict[int, int]:
        pipeline = [
            {"$match": {"route_id": {"$in": list(set(route_ids))}}},
            {"$group": {"_id": "$route_id", "n": {"$sum": 1}}},
        ]
        return {row["_id"]: row["n"] async for row in self.db.stops.aggregate(pipeline)}

    @_wrap_errors
    async def get_stop(self, stop_id: int) -> Optional[dict]:
        return _out(await self.db.stops.find_one({"_id": stop_id}))

    @_wrap_errors
    async def get_stops(self, stop_ids: Iterable[int]) -> Dict[int, dict]:
        cur = self.db.stops.find({"_id": {"$in": list(set(stop_ids))}})
        out: Dict[int, dict] = {}
        async for s in cur:
            s = _out(s)
            out[s["id"]] = s
        return out

    @_wrap_errors
    async def insert_stop(self, doc: dict) -> dict:
        doc = {**doc, "_id": await self._next_id("stops")}
        await self.db.stops.insert_one(doc)
        return _out(doc)

    @_wrap_errors
    async def update_stop(self, stop_id: int, fields: dict) -> Optional[dict]:
        doc = await self.db.stops.find_one_and_update(
            {"_id": stop_id}, {"$set": fields}, return_document=ReturnDocument.AFTER
        )
        return _out(doc)

    @_wrap_errors
    async def delete_stop(self, stop_id: int) -> bool:
        res = await self.db.stops.delete_one({"_id": stop_id})
        return res.deleted_count > 0

    @_wrap_errors
    async def delete_stops_for_route(self, route_id: int) -> int:
        res = await self.db.stops.delete_many({"route_id": route_id})
        return res.deleted_count

    # Pickup events (append-only: no update/delete here)
    @_wrap_errors
    async def insert_pickup_event(self, doc: dict) -> dict:
        doc = dict(doc)
        doc.setdefault("timestamp", _utcnow())
        doc["_id"] = await self._next_id("pickup_events")
        await self.db.pickup_events.insert_one(doc)
        return _out(doc)

    @_wrap_errors
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
        query: dict = {}
        if completed is not None:
            query["completed"] = completed
        if driver_initials:
            query["driver_initials"] = _like(driver_initials)
        ts: dict = {}
        if date_from is not None:
            ts["$gte"] = date_from
        if date_before is not None:
            ts["$lt"] = date_before
        if ts:
            query["timestamp"] = ts
        if stop_ids is not None:
            query["stop_id"] = {"$in": list(set(stop_ids))}
        cur = (
            self.db.pickup_events.find(query)
            .sort([("timestamp", DESCENDING), ("_id", DESCENDING)])
            .skip(offset)
            .limit(limit)
        )
        return [_out(e) async for e in cur]
