"""
Request helpers shared by the Opal route blueprints.
"""

from typing import Any

from flask import current_app, request

from connector.core.directory_service import DirectoryService
from connector.core.errors import ValidationError

DIRECTORY_SERVICE_KEY = "DIRECTORY_SERVICE"


def get_directory_service() -> DirectoryService:
    """Return the directory service created at startup."""
    return current_app.config[DIRECTORY_SERVICE_KEY]


def read_json_body() -> Any:
    """Parse the (already signature-checked) request body as JSON.

    Raises:
        ValidationError: If the body is missing or not valid JSON
    """
    payload = request.get_json(silent=True, force=True)
    if payload is None:
        raise ValidationError("Request body is not valid JSON")
    return payload


def cursor_arg() -> str:
    """Return the ``cursor`` query parameter ("" when absent)."""
    return request.args.get("cursor", "")
