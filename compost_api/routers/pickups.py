# compost_api/routers/pickups.py
import logging

from fastapi import APIRouter, Body, Depends, HTTPException

from compost_api.deps import get_store
from compost_api.repos import StoreError
from compost_api.schemas import PickupEventOut
from compost_api.utils.validation import (
    normalize_initials,
    parse_positive_id,
    pickup_completed,
    pickup_payload_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pickups", tags=["pickups"])

@router.post("", status_code=201, response_model=PickupEventOut)
async def create_pickup(body: dict = Body(...), store=Depends(get_store)):
    """
    Append one pickup event. Events are never updated or deleted; a stop's
    status is always its latest event. `completion_status` is the legacy name
    for `completed` and is still accepted.
    """
    problem = pickup_payload_error(body)
    if problem:
        raise HTTPException(400, problem)
    stop_id = parse_positive_id(body["stop_id"])

    notes = body.get("notes")
    notes = notes.strip() if isinstance(notes, str) else None

    try:
        if await store.get_stop(stop_id) is None:
            raise HTTPException(400, "Invalid stop ID")
        created = await store.insert_pickup_event({
            "stop_id": stop_id,
            "driver_initials": normalize_initials(body["driver_initials"]),
            "completed": pickup_completed(body),
            "notes": notes or None,
        })
    except StoreError as ex:
        logger.error("Error inserting pickup event: %s", ex)
        raise HTTPException(500, "Failed to create pickup event")

    logger.info("pickup event %s logged for stop %s", created["id"], stop_id)
    return created
