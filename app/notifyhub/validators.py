from __future__ import annotations

import re
from typing import Any

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_PATTERN = re.compile(r"^\+?[0-9]{10,15}$")
_PHONE_SEPARATORS = re.compile(r"[\s\-()]")
_MIN_USER_ID_LENGTH = 3


def is_valid_email(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    return bool(_EMAIL_PATTERN.match(value.strip()))


def is_valid_phone_number(value: Any) -> bool:
    """Accept 10-15 digits with an optional leading '+', ignoring separators."""
    if not value or not isinstance(value, str):
        return False
    cleaned = _PHONE_SEPARATORS.sub("", value)
    return bool(_PHONE_PATTERN.match(cleaned))


def is_valid_user_id(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    if "@" in value:
        return is_valid_email(value)
    return len(value.strip()) >= _MIN_USER_ID_LENGTH


def is_valid_address(channel: str, address: Any) -> bool:
    if channel == "email":
        return is_valid_email(address)
    if channel == "sms":
        return is_valid_phone_number(address)
    return False
