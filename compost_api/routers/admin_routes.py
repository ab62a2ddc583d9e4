# compost_api/routers/admin_routes.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from compost_api.core.guards import require_id
from compost_api.deps import get_store
from compost_api.repos import StoreError
from compost_api.schemas import RouteIn, RouteOut
from compost_api.services.joins import attach_customers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/routes", tags=["admin"])

@router.get("")
async def list_routes(store=Depends(get_store)):
    try:
        routes = await store.list_routes(order_by="date")
    except StoreError as ex:
        logger.error("Error fetching routes: %s", ex)
        raise HTTPException(500, "Failed to fetch routes")

    if not routes:
        return []

    try:
        counts = await store.count_stops(r["id"] for r in routes)
    except StoreError as ex:
        # routes are still useful without counts
        logger.warning("Error fetching stop counts: %s", ex)
        counts = {}

    return [{**r, "stop_count": counts.get(r["id"], 0)} for r in routes]

@router.post("", status_code=201, response_model=RouteOut)
async def create_route(body: RouteIn, store=Depends(get_store)):
    try:
        return await store.insert_route({
            "date": body.date or None,
            "driver": body.driver or None,
            "notes": body.notes or {},
        })
    except StoreError as ex:
        logger.error("Error creating route: %s", ex)
        raise HTTPException(500, "Failed to create route")

@router.get("/{route_id}")
async def get_route(route_id: str, store=Depends(get_store)):
    """Route with every stop (hidden ones included) for the edit screen."""
    rid = require_id(route_id, "route")
    try:
        route = await store.get_route(rid)
    except StoreError as ex:
        logger.error("Error fetching route %s: %s", rid, ex)
        raise HTTPException(500, "Failed to fetch route")
    if route is None:
        raise HTTPException(404, "Route not found")

    try:
        stops = await attach_customers(store, await store.list_stops(route_id=rid))
    except StoreError as ex:
        logger.warning("Error fetching stops for route %s: %s", rid, ex)
        stops = []

    return {**route, "stops": stops}

@router.put("/{route_id}", response_model=RouteOut)
async def update_route(route_id: str, body: RouteIn, store=Depends(get_store)):
    rid = require_id(route_id, "route")
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(400, "No fields to update")

    try:
        route = await store.update_route(rid, fields)
    except StoreError as ex:
        logger.error("Error updating route %s: %s", rid, ex)
        raise HTTPException(500, "Failed to update route")
    if route is None:
        raise HTTPException(404, "Route not found")
    return route

@router.delete("/{route_id}")
async def delete_route(route_id: str, store=Depends(get_store)):
    """Stops go first, then the route itself."""
    rid = require_id(route_id, "route")
    try:
        route = await store.get_route(rid)
    except StoreError as ex:
        logger.error("Error fetching route %s: %s", rid, ex)
        raise HTTPException(500, "Failed to delete route")
    if route is None:
        raise HTTPException(404, "Route not found")

    try:
        removed = await store.delete_stops_for_route(rid)
    except StoreError as ex:
        logger.error("Error deleting stops for route %s: %s", rid, ex)
        raise HTTPException(500, "Failed to delete route stops")

    try:
        await store.delete_route(rid)
    except StoreError as ex:
        logger.error("Error deleting route %s: %s", rid, ex)
        raise HTTPException(500, "Failed to delete route")

    logger.info("route %s deleted with %d stops", rid, removed)
    return {"success": True}
