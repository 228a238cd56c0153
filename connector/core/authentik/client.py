"""Low-level HTTP client for the Authentik API.

Handles URL building, credential headers and HTTP error detection. Typed
operations live in ``connector.core.directory_service``.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import requests

from .exceptions import AuthentikAPIError, MalformedResponseError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10
API_PREFIX = "/api/v3"

CF_ACCESS_CLIENT_ID_HEADER = "CF-Access-Client-Id"
CF_ACCESS_CLIENT_SECRET_HEADER = "CF-Access-Client-Secret"


@dataclass(frozen=True)
class AuthContext:
    """Headers attached to every outbound call of one operation."""
    headers: Mapping[str, str] = field(default_factory=dict)


class AuthentikClient:
    """HTTP client for the Authentik API.

    The client is immutable after construction and safe to share between
    request threads.

    Usage:
        client = AuthentikClient("https://authentik.example.com", token="ak-...")
        ctx = client.authenticate()
        resp = client.get(ctx, "/core/users/", params={"page": 1})
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        default_headers: Optional[Mapping[str, str]] = None,
        timeout: float = REQUEST_TIMEOUT,
        debug: bool = False,
    ):
        """Initialize Authentik client.

        Args:
            base_url: Scheme and host, e.g. "https://authentik.example.com"
            token: Authentik API token (sent as Bearer)
            default_headers: Static headers sent on every call (edge proxy credentials)
            timeout: Per-request timeout in seconds
            debug: Log every outbound call at DEBUG level
        """
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._default_headers = dict(default_headers or {})
        self._timeout = timeout
        self._debug = debug

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def has_default_headers(self) -> bool:
        return bool(self._default_headers)

    def authenticate(self) -> AuthContext:
        """Build the authenticated context for one operation."""
        headers = dict(self._default_headers)
        headers["Authorization"] = f"Bearer {self._token}"
        headers["Accept"] = "application/json"
        return AuthContext(headers=headers)

    def url(self, path: str) -> str:
        return f"{self._base_url}{API_PREFIX}{path}"

    def get(self, ctx: AuthContext, path: str, params: Optional[Dict] = None) -> requests.Response:
        """Execute GET request.

        Raises:
            AuthentikAPIError: On HTTP error
            requests.RequestException: If Authentik could not be reached
        """
        url = self.url(path)
        self._trace("GET", url, params)
        resp = requests.get(url, params=params, headers=dict(ctx.headers), timeout=self._timeout)
        self._handle_error(resp)
        return resp

    def post(self, ctx: AuthContext, path: str, json: Optional[Dict] = None) -> requests.Response:
        """Execute POST request.

        Raises:
            AuthentikAPIError: On HTTP error
            requests.RequestException: If Authentik could not be reached
        """
        url = self.url(path)
        self._trace("POST", url, json)
        resp = requests.post(url, json=json, headers=dict(ctx.headers), timeout=self._timeout)
        self._handle_error(resp)
        return resp

    def patch(self, ctx: AuthContext, path: str, json: Optional[Dict] = None) -> requests.Response:
        """Execute PATCH request.

        Raises:
            AuthentikAPIError: On HTTP error
            requests.RequestException: If Authentik could not be reached
        """
        url = self.url(path)
        self._trace("PATCH", url, json)
        resp = requests.patch(url, json=json, headers=dict(ctx.headers), timeout=self._timeout)
        self._handle_error(resp)
        return resp

    @staticmethod
    def json(resp: requests.Response) -> Any:
        """Decode a JSON response body.

        Raises:
            MalformedResponseError: If the body is not JSON
        """
        try:
            return resp.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Authentik returned a non-JSON body from {resp.url}") from exc

    def _trace(self, method: str, url: str, payload: Any) -> None:
        if self._debug:
            logger.debug("Authentik %s %s payload=%s", method, url, payload)

    def _handle_error(self, resp: requests.Response) -> None:
        """Centralized error handling for HTTP responses.

        Raises:
            AuthentikAPIError: If response status indicates error
        """
        if resp.status_code >= 400:
            raise AuthentikAPIError(resp.status_code, resp.text, resp.url)
