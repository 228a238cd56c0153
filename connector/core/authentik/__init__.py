"""Authentik API client library.

Architecture:
- client.py: HTTP client with credential headers and error detection
- exceptions.py: Typed exceptions for error handling

Usage:
    from connector.core.authentik import AuthentikClient

    client = AuthentikClient("https://authentik.example.com", token="ak-...")
    ctx = client.authenticate()
    users = client.json(client.get(ctx, "/core/users/", params={"page": 1}))
"""
from .client import (
    AuthContext,
    AuthentikClient,
    REQUEST_TIMEOUT,
    CF_ACCESS_CLIENT_ID_HEADER,
    CF_ACCESS_CLIENT_SECRET_HEADER,
)
from .exceptions import (
    AuthentikError,
    AuthentikAPIError,
    MalformedResponseError,
)

__all__ = [
    # Client
    "AuthContext",
    "AuthentikClient",
    "REQUEST_TIMEOUT",
    "CF_ACCESS_CLIENT_ID_HEADER",
    "CF_ACCESS_CLIENT_SECRET_HEADER",

    # Exceptions
    "AuthentikError",
    "AuthentikAPIError",
    "MalformedResponseError",
]
