"""Pytest shared fixtures for the connector tests."""
import json
import os
import pathlib
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

# Add project root to Python path (scripts/ is not an installed package)
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("OPAL_SIGNING_SECRET", "test-signing-secret")
os.environ.setdefault("AUTHENTIK_TOKEN", "ak-test-token")

import pytest
import requests

from connector.config import AppConfig
from connector.core.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, generate_signature
from connector.flask_app import create_app

SIGNING_SECRET = "shh"
AUTHENTIK_HOST = "authentik.test"
AUTHENTIK_API = f"https://{AUTHENTIK_HOST}/api/v3"
TIMESTAMP = "1700000000"


# ─────────────────────────────────────────────────────────────────────────────
# Fake Authentik API
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload: Any, status_code: int = 200, url: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.url = url
        self.text = "" if payload is None else json.dumps(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


@dataclass
class Call:
    method: str
    path: str
    params: dict = field(default_factory=dict)
    json: Any = None
    headers: dict = field(default_factory=dict)
    timeout: Optional[float] = None


class FakeAuthentik:
    """Routes stubbed requests.get/post/patch calls to canned Authentik answers."""

    def __init__(self):
        self.calls: list[Call] = []
        self._routes: dict[tuple[str, str], Any] = {}

    def add(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        self._routes[(method, path)] = (payload, status)

    def add_handler(self, method: str, path: str, handler: Callable[[Call], StubResponse]) -> None:
        self._routes[(method, path)] = handler

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self._routes[(method, path)] = exc

    def add_sequence(self, method: str, path: str, answers: list[tuple[Any, int]]) -> None:
        """Answer successive calls with ``answers`` (payload, status) in order."""
        remaining = iter(answers)

        def handler(call: Call) -> StubResponse:
            payload, status = next(remaining)
            return StubResponse(payload, status, AUTHENTIK_API + path)

        self.add_handler(method, path, handler)

    def paginate(self, path: str, pages: list[list[dict]]) -> None:
        """Serve ``pages`` the way Authentik's page-number pagination does."""
        total = len(pages)

        def handler(call: Call) -> StubResponse:
            page = int(call.params.get("page", 1))
            if page < 1 or (total and page > total) or (not total and page != 1):
                return StubResponse({"detail": "Invalid page."}, 404, AUTHENTIK_API + path)
            results = pages[page - 1] if total else []
            return StubResponse(
                {
                    "pagination": {
                        "next": page + 1 if page < total else 0,
                        "previous": page - 1,
                        "count": sum(len(p) for p in pages),
                        "current": page,
                        "total_pages": total,
                        "start_index": 1,
                        "end_index": len(results),
                    },
                    "results": results,
                },
                200,
                AUTHENTIK_API + path,
            )

        self.add_handler("GET", path, handler)

    def calls_to(self, method: str, path: str) -> list[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]

    def handle(self, method: str, url: str, params=None, json=None, headers=None, timeout=None, **_kwargs):
        if not url.startswith(AUTHENTIK_API):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        path = url[len(AUTHENTIK_API):]
        call = Call(method, path, dict(params or {}), json, dict(headers or {}), timeout)
        self.calls.append(call)

        route = self._routes.get((method, path))
        if route is None:
            return StubResponse({"detail": "Not found."}, 404, url)
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(call)
        payload, status = route
        return StubResponse(payload, status, url)


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch):
    """Fail loudly if a test reaches for the network without a stub."""

    def _unexpected(method):
        def _raise(url, *args, **kwargs):
            raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")
        return _raise

    monkeypatch.setattr(requests, "get", _unexpected("GET"))
    monkeypatch.setattr(requests, "post", _unexpected("POST"))
    monkeypatch.setattr(requests, "patch", _unexpected("PATCH"))


@pytest.fixture()
def fake_authentik(monkeypatch):
    """Fake Authentik API wired into requests.get/post/patch."""
    fake = FakeAuthentik()
    monkeypatch.setattr(requests, "get", lambda url, **kw: fake.handle("GET", url, **kw))
    monkeypatch.setattr(requests, "post", lambda url, **kw: fake.handle("POST", url, **kw))
    monkeypatch.setattr(requests, "patch", lambda url, **kw: fake.handle("PATCH", url, **kw))
    return fake


# ─────────────────────────────────────────────────────────────────────────────
# Configuration & Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    base = dict(
        opal_signing_secret=SIGNING_SECRET,
        authentik_token="ak-test-token",
        authentik_host=AUTHENTIK_HOST,
        authentik_scheme="https",
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def app_config() -> AppConfig:
    return make_config()


@pytest.fixture()
def app(app_config):
    flask_app = create_app(app_config)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


def signed_headers(body: bytes = b"", timestamp: str = TIMESTAMP, secret: str = SIGNING_SECRET) -> dict:
    """Headers Opal would send for ``body``."""
    return {
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: generate_signature(secret, timestamp, body),
    }


def signed_json(payload: Any) -> tuple[bytes, dict]:
    """Serialize ``payload`` and sign it; returns (body, headers)."""
    body = json.dumps(payload).encode("utf-8")
    headers = signed_headers(body)
    headers["Content-Type"] = "application/json"
    return body, headers


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "critical: marks tests as critical security tests (P0 priority)"
    )


# ─────────────────────────────────────────────────────────────────────────────
# Helper fixtures (test modules never import conftest directly)
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def config_factory():
    return make_config


@pytest.fixture()
def sign():
    return signed_headers


@pytest.fixture()
def sign_json():
    return signed_json
