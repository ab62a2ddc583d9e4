from typing import Any

from fastapi import HTTPException

from compost_api.utils.validation import parse_positive_id

def require_id(raw: Any, label: str) -> int:
    value = parse_positive_id(raw)
    if value is None:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID")
    return value
