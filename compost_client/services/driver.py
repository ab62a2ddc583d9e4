# compost_client/services/driver.py
import logging
from typing import Optional

from pydantic import BaseModel

from compost_api.utils.validation import parse_positive_id, pickup_payload_error
from compost_client.network import NetworkSignal
from compost_client.offline_queue import OfflineQueue
from compost_client.services.api_client import ApiClient, Result

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "Saved offline. Will sync when online."

class PickupResult(BaseModel):
    success: bool
    offline: bool = False
    error: Optional[str] = None
    data: Optional[dict] = None

def fetch_routes(api: ApiClient) -> Result:
    return api.call("GET", "/api/routes")

def fetch_stops_by_route(api: ApiClient, route_id) -> Result:
    rid = parse_positive_id(route_id)
    if rid is None:
        return Result(error="Invalid route ID")
    return api.call("GET", f"/api/routes/{rid}")

def submit_pickup(api: ApiClient, payload: dict) -> Result:
    """The one network submission used both online and when replaying the queue."""
    return api.call("POST", "/api/pickups", json=payload)

def queued_submitter(api: ApiClient):
    """Adapter for OfflineQueue.sync_all / OfflineSync."""
    return lambda payload: submit_pickup(api, payload).ok

def create_pickup_event(
    payload: dict,
    api: ApiClient,
    queue: OfflineQueue,
    network: NetworkSignal,
) -> PickupResult:
    """
    Send a pickup confirmation, or park it in the offline queue when the
    network signal says we are offline. Never raises; every outcome is a
    PickupResult so the caller renders failures one way.
    """
    try:
        # a payload the server would reject must never reach the queue
        problem = pickup_payload_error(payload)
        if problem:
            return PickupResult(success=False, error=problem)

        if not network.online:
            logger.info("Offline mode - queueing pickup event for stop %s", payload.get("stop_id"))
            queue.enqueue(payload)
            return PickupResult(success=True, offline=True, error=OFFLINE_MESSAGE)

        logger.info("Submitting pickup event for stop %s", payload.get("stop_id"))
        res = submit_pickup(api, payload)
        if not res.ok:
            return PickupResult(success=False, error=res.error or "Failed to log pickup")

        logger.info("Pickup event created: %s", (res.data or {}).get("id"))
        return PickupResult(success=True, data=res.data)
    except Exception as ex:
        logger.exception("Unexpected create_pickup_event error")
        return PickupResult(success=False, error=str(ex) or "Failed to log pickup")
