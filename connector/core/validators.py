"""Input validation helpers for identifiers and request bodies."""
from __future__ import annotations
from typing import Any

from .errors import ValidationError


def parse_user_pk(raw: str) -> int:
    """Parse an Opal user id into Authentik's numeric user primary key.

    Args:
        raw: User id as sent by Opal (e.g. "42")

    Returns:
        Integer primary key

    Raises:
        ValidationError: If the id is not a non-negative integer
    """
    if not isinstance(raw, str) or not (raw.isascii() and raw.isdigit()):
        raise ValidationError(f"Invalid user id '{raw}': expected a numeric Authentik user pk")
    return int(raw)


def require_group_id(raw: Any, field: str = "group_id") -> str:
    """Validate a group identifier.

    Args:
        raw: Value to validate
        field: Field name for error messages

    Returns:
        Trimmed group id

    Raises:
        ValidationError: If the value is missing or not a string
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError(f"{field} is required")
    if "/" in raw:
        raise ValidationError(f"{field} contains invalid characters")
    return raw.strip()


def require_field(payload: Any, field: str) -> str:
    """Read a required string field from a JSON object body.

    Raises:
        ValidationError: If the body is not an object or the field is missing
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    value = payload.get(field)
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()
