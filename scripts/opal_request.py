"""Send a request to the connector signed the way Opal signs it.

Useful to exercise a running connector by hand:

    OPAL_SIGNING_SECRET=... python scripts/opal_request.py GET /groups --cursor 2
    OPAL_SIGNING_SECRET=... python scripts/opal_request.py POST /groups/<id>/users --data '{"user_id": "42"}'
"""
from __future__ import annotations
import argparse
import json
import os
import sys
import time
from typing import Optional

import requests

from connector.core.signature import SIGNATURE_HEADER, TIMESTAMP_HEADER, generate_signature

REQUEST_TIMEOUT = 30


def build_signed_headers(secret: str, body: bytes, timestamp: Optional[str] = None) -> dict:
    """Return the Opal signature headers for ``body``."""
    timestamp = timestamp or str(int(time.time()))
    headers = {
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: generate_signature(secret, timestamp, body),
    }
    if body:
        headers["Content-Type"] = "application/json"
    return headers


def send(base_url: str, method: str, path: str, secret: str, data: str = "", cursor: str = "") -> requests.Response:
    """Sign and send one request to the connector."""
    body = data.encode("utf-8")
    params = {"cursor": cursor} if cursor else None
    return requests.request(
        method.upper(),
        f"{base_url.rstrip('/')}{path}",
        data=body or None,
        params=params,
        headers=build_signed_headers(secret, body),
        timeout=REQUEST_TIMEOUT,
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Send an Opal-signed request to the connector")
    parser.add_argument("method", choices=["GET", "POST", "DELETE", "get", "post", "delete"])
    parser.add_argument("path", help="Route, e.g. /groups or /groups/<id>/users")
    parser.add_argument("--base-url", default=os.environ.get("CONNECTOR_URL", "http://localhost:5000"))
    parser.add_argument("--secret", default=os.environ.get("OPAL_SIGNING_SECRET"))
    parser.add_argument("--data", default="", help="Raw JSON body")
    parser.add_argument("--cursor", default="", help="Pagination cursor")
    args = parser.parse_args(argv)

    if not args.secret:
        parser.error("--secret or OPAL_SIGNING_SECRET is required")

    if args.data:
        try:
            json.loads(args.data)
        except ValueError as exc:
            parser.error(f"--data is not valid JSON: {exc}")

    try:
        resp = send(args.base_url, args.method, args.path, args.secret, data=args.data, cursor=args.cursor)
    except requests.RequestException as exc:
        print(f"[opal_request] ✗ Request failed: {exc}", file=sys.stderr)
        return 2

    print(f"[opal_request] {resp.status_code}")
    print(resp.text)
    return 0 if resp.status_code < 400 else 1


if __name__ == "__main__":
    sys.exit(main())
