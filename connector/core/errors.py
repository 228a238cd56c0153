"""Connector error taxonomy and Authentik error translation.

Every error that can reach a route handler is a ``ConnectorError`` carrying
the HTTP status and message Opal receives. ``translate_error`` is the single
place where failures from the Authentik client are categorized.
"""
from __future__ import annotations
import logging
from typing import Optional

import requests

from .authentik.exceptions import AuthentikAPIError

logger = logging.getLogger(__name__)

# Status used when Authentik never answered (DNS, TLS, connection reset, ...)
UNREACHABLE_STATUS = 500


class ConnectorError(Exception):
    """Base error with an HTTP status and a caller-facing message."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        if status_code is not None:
            self.status_code = status_code
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to the Opal error body."""
        return {"code": self.status_code, "message": self.message}


class AuthenticationError(ConnectorError):
    """Missing or invalid request signature headers."""

    status_code = 401


class ConfigurationError(ConnectorError):
    """A required secret or credential is missing at startup."""

    status_code = 500


class ValidationError(ConnectorError):
    """Caller-supplied value failed local parsing."""

    status_code = 400


class DirectoryError(ConnectorError):
    """A call to Authentik failed.

    Attributes:
        status_code: Status Authentik answered with, or 500 when unreachable
        message: Operation label, safe to return to the caller
        cause: Underlying exception (logged, never returned)
    """

    def __init__(self, status_code: int, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message, status_code)

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message} due to: {self.cause}"


def _status_from(error: BaseException) -> Optional[int]:
    """Return the HTTP status carried by ``error``, if Authentik answered."""
    if isinstance(error, AuthentikAPIError):
        return error.status_code
    if isinstance(error, requests.RequestException) and error.response is not None:
        return error.response.status_code
    return None


def translate_error(error: BaseException, operation: str) -> DirectoryError:
    """Map a failed Authentik call to a ``DirectoryError``.

    Args:
        error: Exception raised by the Authentik client
        operation: Human-readable label, e.g. "failed to list users from Authentik"

    Returns:
        DirectoryError reusing Authentik's status code when a response exists,
        500 otherwise
    """
    if isinstance(error, DirectoryError):
        return error

    status = _status_from(error)
    if status is None:
        status = UNREACHABLE_STATUS

    logger.warning("%s (status=%s): %s", operation, status, error)
    return DirectoryError(status, operation, cause=error)
