# compost_api/utils/formatting.py
import re
import urllib.parse
from typing import Optional

def _digits(phone: str) -> str:
    return re.sub(r"\D", "", phone)

def format_phone_number(phone: Optional[str]) -> str:
    """
    (XXX) XXX-XXXX for 10 digits, +1 (XXX) XXX-XXXX for 11 digits starting with 1.
    Anything else comes back as given.
    """
    if not phone:
        return "No phone"
    cleaned = _digits(phone)
    if len(cleaned) == 10:
        return f"({cleaned[:3]}) {cleaned[3:6]}-{cleaned[6:]}"
    if len(cleaned) == 11 and cleaned[0] == "1":
        return f"+1 ({cleaned[1:4]}) {cleaned[4:7]}-{cleaned[7:]}"
    return phone

def get_phone_link(phone: Optional[str]) -> Optional[str]:
    if not phone:
        return None
    cleaned = _digits(phone)
    return f"tel:{cleaned}" if cleaned else None

def get_sms_link(phone: Optional[str]) -> Optional[str]:
    if not phone:
        return None
    cleaned = _digits(phone)
    return f"sms:{cleaned}" if cleaned else None

def get_map_link(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    return "https://www.google.com/maps/search/?api=1&query=" + urllib.parse.quote(address, safe="")
