import pytest

from compost_api.utils.formatting import format_phone_number, get_map_link, get_phone_link, get_sms_link
from compost_api.utils.validation import (
    normalize_initials,
    parse_positive_id,
    pickup_completed,
    pickup_payload_error,
    validate_driver_initials,
)

@pytest.mark.parametrize("initials", ["JD", "J9D", "abc", "42", " jd "])
def test_initials_accepted(initials):
    assert validate_driver_initials(initials)

@pytest.mark.parametrize("initials", ["", "J", "JDOE", "J-D", "J D", None, 12])
def test_initials_rejected(initials):
    assert not validate_driver_initials(initials)

def test_normalize_initials():
    assert normalize_initials(" jd ") == "JD"

def test_phone_formatting():
    assert format_phone_number("5405551234") == "(540) 555-1234"
    assert format_phone_number("15405551234") == "+1 (540) 555-1234"
    assert format_phone_number("540-555-1234") == "(540) 555-1234"
    assert format_phone_number("555-1234") == "555-1234"
    assert format_phone_number("25405551234") == "25405551234"
    assert format_phone_number(None) == "No phone"

def test_links():
    assert get_phone_link("(540) 555-1234") == "tel:5405551234"
    assert get_sms_link("540.555.1234") == "sms:5405551234"
    assert get_phone_link("n/a") is None
    assert get_sms_link(None) is None
    assert get_map_link("100 Caroline St, Fredericksburg") == (
        "https://www.google.com/maps/search/?api=1&query=100%20Caroline%20St%2C%20Fredericksburg"
    )
    assert get_map_link("") is None

@pytest.mark.parametrize("raw,expected", [("7", 7), (3, 3), ("0", None), ("-2", None), ("abc", None), ("1.5", None), (None, None)])
def test_parse_positive_id(raw, expected):
    assert parse_positive_id(raw) == expected

def test_pickup_payload_accepts_legacy_completed_name():
    body = {"stop_id": "7", "driver_initials": "ab", "completion_status": False}
    assert pickup_payload_error(body) is None
    assert pickup_completed(body) is False
    assert pickup_completed({"completed": True, "completion_status": False}) is True

@pytest.mark.parametrize("body,message", [
    ({"stop_id": 0, "driver_initials": "AB", "completed": True}, "stop_id is required"),
    ({"stop_id": 3, "driver_initials": "", "completed": True}, "driver_initials is required"),
    ({"stop_id": 3, "driver_initials": "AB", "completed": 1}, "completed (or completion_status) is required and must be a boolean"),
])
def test_pickup_payload_errors(body, message):
    assert pickup_payload_error(body) == message
