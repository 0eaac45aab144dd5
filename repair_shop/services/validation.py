"""
Input validation shared by the entity services.

Each helper returns the cleaned value or raises ``InvalidInputError``
naming the offending field.  Checks here are about the shape of a
single value; existence and uniqueness are decided by the consistency
coordinator against the store.
"""

import re
from datetime import datetime, timezone

from flask import current_app

from repair_shop.exceptions import InvalidInputError

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\-() ]{7,20}$")


def require_text(data: dict, field: str, max_length: int | None = None) -> str:
    """Return ``data[field]`` stripped; reject missing, non-string or blank values."""
    value = data.get(field)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} is required", field=field)
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise InvalidInputError(
            f"{field} must be at most {max_length} characters", field=field
        )
    return value


def require_email(data: dict, field: str = "email") -> str:
    value = require_text(data, field, max_length=255)
    if not EMAIL_PATTERN.match(value):
        raise InvalidInputError(f"{field} is not a valid email address", field=field)
    return value.lower()


def require_phone(data: dict, field: str = "phone") -> str:
    value = require_text(data, field, max_length=20)
    if not PHONE_PATTERN.match(value):
        raise InvalidInputError(f"{field} is not a valid phone number", field=field)
    return value


def require_id(data: dict, field: str) -> int:
    """Return a positive integer id from ``data[field]``."""
    value = data.get(field)
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInputError(f"{field} must be a positive integer id", field=field)
    return value


def require_year(data: dict, field: str = "year") -> int:
    """Return a car model year within the configured inclusive bounds."""
    value = data.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{field} must be an integer", field=field)
    low = current_app.config["CAR_YEAR_MIN"]
    high = current_app.config["CAR_YEAR_MAX"]
    if not low <= value <= high:
        raise InvalidInputError(
            f"{field} must be between {low} and {high}", field=field
        )
    return value


def require_datetime(data: dict, field: str) -> datetime:
    """
    Return an ISO-8601 timestamp from ``data[field]`` as a naive UTC
    datetime, the form the store hands back.  Values with an offset are
    converted to UTC; naive values are taken to be UTC already.
    """
    value = data.get(field)
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            value = None
    if not isinstance(value, datetime):
        raise InvalidInputError(f"{field} must be an ISO-8601 timestamp", field=field)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def require_payload(data) -> dict:
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data
