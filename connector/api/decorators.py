"""
Flask request gate for Opal request signatures.

Every route of the connector is called by Opal only. Opal signs each request
with the shared signing secret; requests whose signature does not match are
rejected with 401 before any route handler runs.

Security:
- HMAC-SHA256 over "v0:<timestamp>:<raw body>"
- Constant-time comparison
- Only a truncated hash of the presented signature is ever logged
"""

import hashlib
import logging
from typing import Optional

from flask import Flask, request

from connector.core.errors import AuthenticationError
from connector.core.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, verify_signature

logger = logging.getLogger(__name__)


def _log_auth_failure(reason: str, signature: Optional[str]) -> None:
    """Log a rejected request without leaking the signature."""
    signature_hash = hashlib.sha256(signature.encode()).hexdigest()[:12] if signature else "none"
    client_ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    logger.warning(
        "Opal signature rejected | reason=%s | signature_hash=%s | method=%s | path=%s | client_ip=%s",
        reason, signature_hash, request.method, request.path, client_ip,
    )


def validate_opal_signature(signing_secret: str) -> None:
    """Verify the current request's Opal signature.

    Reads the raw body with caching enabled so handlers can still call
    ``request.get_json()`` afterwards.

    Raises:
        AuthenticationError: Missing header or signature mismatch
    """
    signature = request.headers.get(SIGNATURE_HEADER, "")
    if not signature:
        _log_auth_failure("missing-signature", None)
        raise AuthenticationError(f"{SIGNATURE_HEADER} header is missing")

    timestamp = request.headers.get(TIMESTAMP_HEADER, "")
    if not timestamp:
        _log_auth_failure("missing-timestamp", signature)
        raise AuthenticationError(f"{TIMESTAMP_HEADER} header is missing")

    body = request.get_data(cache=True)
    if not verify_signature(signing_secret, timestamp, body, signature):
        _log_auth_failure("mismatch", signature)
        raise AuthenticationError("Invalid signature")


def register_signature_gate(app: Flask, signing_secret: str) -> None:
    """Install the signature check in front of every route of ``app``."""

    @app.before_request
    def require_opal_signature() -> None:
        validate_opal_signature(signing_secret)

