# compost_api/routers/routes.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from compost_api.core.guards import require_id
from compost_api.deps import get_store
from compost_api.repos import StoreError
from compost_api.schemas import RouteOut
from compost_api.services.joins import attach_customers

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/routes", tags=["routes"])

@router.get("", response_model=List[RouteOut])
async def list_routes(store=Depends(get_store)):
    """Route picker for drivers, most recently created first."""
    try:
        return await store.list_routes(order_by="id")
    except StoreError as ex:
        logger.error("Error fetching routes: %s", ex)
        raise HTTPException(500, "Failed to fetch routes")

@router.get("/{route_id}")
async def route_stops(route_id: str, store=Depends(get_store)):
    """Stops visible to the driver, in run order, each with its customer."""
    rid = require_id(route_id, "route")
    try:
        stops = await store.list_stops(route_id=rid, visible_only=True)
        return await attach_customers(store, stops)
    except StoreError as ex:
        logger.error("Error fetching stops for route %s: %s", rid, ex)
        raise HTTPException(500, "Failed to fetch stops")
