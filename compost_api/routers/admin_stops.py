# compost_api/routers/admin_stops.py
import logging
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from compost_api.core.guards import require_id
from compost_api.deps import get_store
from compost_api.repos import StoreError
from compost_api.schemas import StopOrderUpdate, StopUpdate
from compost_api.services.joins import attach_customers
from compost_api.utils.validation import is_positive_int

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/stops", tags=["admin"])

async def _with_customer(store, stop: dict) -> dict:
    return (await attach_customers(store, [stop]))[0]

@router.post("", status_code=201)
async def create_stop(body: dict = Body(...), store=Depends(get_store)):
    if not body.get("route_id"):
        raise HTTPException(400, "route_id is required")
    if not body.get("customer_id"):
        raise HTTPException(400, "customer_id is required")
    if not is_positive_int(body.get("stop_order")):
        raise HTTPException(400, "stop_order must be a positive integer")
    route_id = require_id(body["route_id"], "route")

    try:
        stop = await store.insert_stop({
            "route_id": route_id,
            "customer_id": str(body["customer_id"]),
            "stop_order": body["stop_order"],
            "stop_type": body.get("stop_type") or "pickup",
            "visible_to_driver": body.get("visible_to_driver") is not False,
            "flags": body.get("flags") or "",
            "flag_notes": body.get("flag_notes") or "",
        })
        return await _with_customer(store, stop)
    except StoreError as ex:
        logger.error("Error creating stop: %s", ex)
        raise HTTPException(500, "Failed to create stop")

@router.post("/batch")
async def batch_update_stop_orders(body: dict = Body(...), store=Depends(get_store)):
    """
    Reassign stop_order for a set of stops. Rows are updated one by one with no
    transaction; failures are collected and reported with `partial: true`
    while the rows that did update stay updated.
    """
    raw = body.get("updates")
    if not isinstance(raw, list) or not raw:
        raise HTTPException(400, "updates array is required")

    for item in raw:
        if not isinstance(item, dict) or not is_positive_int(item.get("stop_id")):
            raise HTTPException(400, "Each update must have a valid stop_id")
        if not is_positive_int(item.get("stop_order")):
            raise HTTPException(400, "Each update must have a valid stop_order (positive integer)")
    updates: List[StopOrderUpdate] = [StopOrderUpdate(**item) for item in raw]

    failed: List[int] = []
    for upd in updates:
        try:
            stop = await store.update_stop(upd.stop_id, {"stop_order": upd.stop_order})
        except StoreError as ex:
            logger.error("Error updating stop %s: %s", upd.stop_id, ex)
            failed.append(upd.stop_id)
            continue
        if stop is None:
            logger.warning("Stop %s not found during batch reorder", upd.stop_id)
            failed.append(upd.stop_id)

    if failed:
        return JSONResponse(
            status_code=500,
            content={
                "error": ", ".join(f"Failed to update stop {sid}" for sid in failed),
                "partial": True,
                "failed_ids": failed,
            },
        )
    return {"success": True}

@router.put("/{stop_id}")
async def update_stop(stop_id: str, body: StopUpdate, store=Depends(get_store)):
    sid = require_id(stop_id, "stop")
    fields = body.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(400, "No fields to update")

    try:
        stop = await store.update_stop(sid, fields)
        if stop is None:
            raise HTTPException(404, "Stop not found")
        return await _with_customer(store, stop)
    except StoreError as ex:
        logger.error("Error updating stop %s: %s", sid, ex)
        raise HTTPException(500, "Failed to update stop")

@router.delete("/{stop_id}")
async def delete_stop(stop_id: str, store=Depends(get_store)):
    """Remaining stops are renumbered by the caller through /batch."""
    sid = require_id(stop_id, "stop")
    try:
        await store.delete_stop(sid)
    except StoreError as ex:
        logger.error("Error deleting stop %s: %s", sid, ex)
        raise HTTPException(500, "Failed to delete stop")
    return {"success": True}
