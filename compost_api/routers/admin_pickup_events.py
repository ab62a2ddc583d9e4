# compost_api/routers/admin_pickup_events.py
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from compost_api.core.config import settings
from compost_api.deps import get_store
from compost_api.repos import StoreError
from compost_api.services.joins import attach_event_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/pickup-events", tags=["admin"])

def _day_start(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)

@router.get("")
async def list_pickup_events(
    limit: int = Query(settings.pickup_events_default_limit, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    route_id: Optional[int] = Query(None, ge=1),
    driver_initials: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    completed: Optional[bool] = Query(None),
    store=Depends(get_store),
):
    """
    Pickup history, newest first, each event with its stop, customer and route.
    `date_to` covers the whole day; `completed=true` keeps completed pickups only.
    """
    try:
        stop_ids = None
        if route_id is not None:
            stop_ids = [s["id"] for s in await store.list_stops(route_id=route_id)]

        events = await store.list_pickup_events(
            completed=True if completed else None,
            driver_initials=(driver_initials or "").strip() or None,
            date_from=_day_start(date_from) if date_from else None,
            date_before=_day_start(date_to + timedelta(days=1)) if date_to else None,
            stop_ids=stop_ids,
            offset=offset,
            limit=limit,
        )
    except StoreError as ex:
        logger.error("Error fetching pickup events: %s", ex)
        raise HTTPException(500, "Failed to fetch pickup events")

    try:
        return await attach_event_context(store, events)
    except StoreError as ex:
        logger.warning("Error fetching pickup event context: %s", ex)
        return [{**e, "stop": None} for e in events]
