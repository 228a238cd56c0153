"""Authentik-specific exceptions for error handling."""


class AuthentikError(Exception):
    """Base exception for all Authentik operations."""
    pass


class AuthentikAPIError(AuthentikError):
    """HTTP error from the Authentik API.

    Attributes:
        status_code: HTTP status code
        message: Error message from response
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, message: str, endpoint: str):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"[{status_code}] {endpoint}: {message}")


class MalformedResponseError(AuthentikError):
    """Authentik answered 2xx with a body the connector cannot read."""
    pass
