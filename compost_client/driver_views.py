# compost_client/driver_views.py
"""View state for the driver side: initials prompt and the stop-by-stop run-through."""
import logging
from typing import Callable, List, Optional

from compost_api.utils.formatting import format_phone_number, get_map_link, get_phone_link, get_sms_link
from compost_api.utils.validation import normalize_initials, validate_driver_initials
from compost_client.offline_queue import DRIVER_INITIALS_KEY
from compost_client.services.driver import PickupResult

logger = logging.getLogger(__name__)

# ---------------- Initials prompt ----------------
def check_initials(raw: Optional[str]) -> Optional[str]:
    """Error message for the prompt, or None when the initials are usable."""
    if not (raw or "").strip():
        return "Please enter your initials"
    if not validate_driver_initials(raw):
        return "Initials must be 2-3 letters or numbers"
    return None

def remember_initials(storage, initials: str) -> None:
    try:
        storage.set_item(DRIVER_INITIALS_KEY, initials.strip())
    except OSError as ex:
        logger.warning("Could not remember driver initials: %s", ex)

def recall_initials(storage) -> str:
    try:
        return storage.get_item(DRIVER_INITIALS_KEY) or ""
    except (OSError, ValueError) as ex:
        logger.warning("Could not read remembered initials: %s", ex)
        return ""

def contact_links(customer: Optional[dict]) -> dict:
    customer = customer or {}
    phone = customer.get("phone")
    address = customer.get("address")
    return {
        "phone": format_phone_number(phone),
        "tel": get_phone_link(phone),
        "sms": get_sms_link(phone),
        "map": get_map_link(address),
    }

# ---------------- Run-through ----------------
class RouteRunner:
    """
    Walks a driver through the visible stops of one route. Logging a pickup
    (success or flagged) advances to the next stop; after the last stop the
    completion callback fires. Offline-queued pickups advance too, with a
    non-alarming notice instead of an error.
    """

    def __init__(
        self,
        stops: List[dict],
        driver_initials: str,
        submit: Callable[[dict], PickupResult],
        on_complete: Callable[[], None] = lambda: None,
    ):
        self.stops = stops
        self.driver_initials = normalize_initials(driver_initials)
        self.submit = submit
        self.on_complete = on_complete
        self.index = 0
        self.error: Optional[str] = None
        self.notice: Optional[str] = None
        self.completed = False

    @property
    def current_stop(self) -> Optional[dict]:
        return self.stops[self.index] if self.stops else None

    @property
    def is_first(self) -> bool:
        return self.index == 0

    @property
    def is_last(self) -> bool:
        return self.index == len(self.stops) - 1

    @property
    def progress(self) -> str:
        return f"Stop {self.index + 1} of {len(self.stops)}"

    def succeed(self, notes: Optional[str] = None) -> bool:
        return self._log(True, (notes or "").strip() or None)

    def flag(self, notes: Optional[str]) -> bool:
        """A pickup that could not be completed needs a reason."""
        reason = (notes or "").strip()
        if not reason:
            self.error = "Please provide a reason for the issue"
            return False
        return self._log(False, reason)

    def previous(self) -> None:
        if not self.is_first:
            self.index -= 1
            self.error = None
            self.notice = None

    def _log(self, completed: bool, notes: Optional[str]) -> bool:
        stop = self.current_stop
        if stop is None or self.completed:
            return False
        self.error = None
        self.notice = None

        payload = {
            "stop_id": stop["id"],
            "driver_initials": self.driver_initials,
            "completed": completed,
        }
        if notes:
            payload["notes"] = notes

        result = self.submit(payload)
        if not result.success:
            self.error = result.error or "Failed to log pickup"
            return False
        if result.offline:
            self.notice = result.error

        if self.is_last:
            self.completed = True
            self.on_complete()
        else:
            self.index += 1
        return True
