"""Opal request signatures.

Opal signs every request with HMAC-SHA256 over ``v0:<timestamp>:<body>``
keyed by the connector's signing secret, and sends the hex digest in
``X-Opal-Signature`` with the timestamp in ``X-Opal-Request-Timestamp``.
"""
from __future__ import annotations
import hashlib
import hmac
from typing import Union

SIGNATURE_HEADER = "X-Opal-Signature"
TIMESTAMP_HEADER = "X-Opal-Request-Timestamp"
SIGNATURE_VERSION = "v0"
EMPTY_BODY = b"{}"


def _normalize_body(body: Union[bytes, str, None]) -> bytes:
    """Return the body bytes that enter the base string.

    Empty and whitespace-only bodies are signed as ``{}``. Anything else is
    used exactly as received.
    """
    if body is None:
        return EMPTY_BODY
    if isinstance(body, str):
        body = body.encode("utf-8")
    if not body.strip():
        return EMPTY_BODY
    return body


def signature_base_string(timestamp: str, body: Union[bytes, str, None]) -> bytes:
    """Build ``v0:<timestamp>:<body>``."""
    prefix = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8")
    return prefix + _normalize_body(body)


def generate_signature(secret: str, timestamp: str, body: Union[bytes, str, None]) -> str:
    """Compute the hex HMAC-SHA256 signature Opal would send.

    Args:
        secret: Shared signing secret
        timestamp: Value of X-Opal-Request-Timestamp, used verbatim
        body: Raw request body

    Returns:
        Lowercase hex digest
    """
    base = signature_base_string(timestamp, body)
    return hmac.new(secret.encode("utf-8"), base, hashlib.sha256).hexdigest()


def verify_signature(secret: str, timestamp: str, body: Union[bytes, str, None], declared_signature: str) -> bool:
    """Check a declared signature against the one computed from the request.

    The comparison is exact (no case folding or trimming) and constant-time.
    """
    if not declared_signature or not timestamp:
        return False
    expected = generate_signature(secret, timestamp, body)
    return hmac.compare_digest(expected.encode("utf-8"), declared_signature.encode("utf-8"))
