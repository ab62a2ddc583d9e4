# compost_api/utils/validation.py
import re
from typing import Any, Optional

_INITIALS_RE = re.compile(r"^[A-Za-z0-9]{2,3}$")

def validate_driver_initials(initials: Any) -> bool:
    """Driver initials are 2-3 alphanumeric characters (surrounding whitespace ignored)."""
    if not initials or not isinstance(initials, str):
        return False
    return bool(_INITIALS_RE.match(initials.strip()))

def normalize_initials(initials: str) -> str:
    return initials.strip().upper()

def parse_positive_id(raw: Any) -> Optional[int]:
    """Path ids are positive integers; anything else is rejected with None."""
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if value >= 1 else None

def is_positive_int(value: Any) -> bool:
    # JSON true/false decode to bool, which is an int subclass
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1

def pickup_completed(body: dict) -> Any:
    """`completion_status` is the legacy name for `completed`."""
    completed = body.get("completed")
    return body.get("completion_status") if completed is None else completed

def pickup_payload_error(body: dict) -> Optional[str]:
    """First problem with a pickup submission, or None when it can be sent."""
    stop_id = body.get("stop_id")
    if not stop_id:
        return "stop_id is required"
    if parse_positive_id(stop_id) is None:
        return "stop_id must be a positive integer"
    if not body.get("driver_initials"):
        return "driver_initials is required"
    if not isinstance(pickup_completed(body), bool):
        return "completed (or completion_status) is required and must be a boolean"
    if not validate_driver_initials(body["driver_initials"]):
        return "driver_initials must be 2-3 alphanumeric characters"
    return None
