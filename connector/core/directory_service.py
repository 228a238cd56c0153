"""Directory service: Opal operations on top of the Authentik API.

Every public method is one Opal operation. Each one:

1. validates caller input locally (no remote call on bad input),
2. builds a single ``AuthContext`` and passes it to every Authentik call,
3. converts Opal cursors to Authentik pages and back via ``pagination``,
4. routes every failure through ``errors.translate_error``.

The service holds only immutable configuration and is shared by all request
threads.

Architecture:
    Flask routes (connector/api/*) ──> DirectoryService ──> AuthentikClient ──> Authentik
"""
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar
from urllib.parse import quote

import requests

from connector.config.settings import AppConfig
from .authentik import (
    AuthContext,
    AuthentikClient,
    AuthentikError,
    CF_ACCESS_CLIENT_ID_HEADER,
    CF_ACCESS_CLIENT_SECRET_HEADER,
)
from .errors import ConfigurationError, DirectoryError, translate_error
from .opal_transformer import OpalTransformer
from .pagination import DEFAULT_PAGE_SIZE, PageWindow, cursor_to_page, page_window_to_cursor
from .validators import parse_user_pk, require_group_id

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures a directory call can surface: HTTP errors, transport errors, and
# payloads that do not have the shape we read.
_CALL_ERRORS = (AuthentikError, requests.RequestException, KeyError, TypeError, ValueError)

USED_BY_GROUP_MODEL = "group"


def _group_path(group_id: str, action: str = "") -> str:
    """Build a group endpoint path with the id escaped as one path segment."""
    return f"/core/groups/{quote(group_id, safe='')}/{action}"


def build_authentik_client(config: AppConfig) -> AuthentikClient:
    """Create the Authentik client for ``config``.

    Raises:
        ConfigurationError: If the token is missing, or only one Cloudflare
            Access credential is set
    """
    if not config.authentik_token:
        raise ConfigurationError("Unable to find Authentik token (AUTHENTIK_TOKEN)")

    default_headers: Dict[str, str] = {}
    if config.edge_proxy_enabled:
        if not (config.cf_access_client_id and config.cf_access_client_secret):
            raise ConfigurationError("Cloudflare Access credentials are not set!")
        default_headers[CF_ACCESS_CLIENT_ID_HEADER] = config.cf_access_client_id
        default_headers[CF_ACCESS_CLIENT_SECRET_HEADER] = config.cf_access_client_secret

    return AuthentikClient(
        config.authentik_base_url,
        token=config.authentik_token,
        default_headers=default_headers,
        timeout=config.authentik_request_timeout,
        debug=config.debug,
    )


class DirectoryService:
    """Typed Opal operations backed by Authentik users and groups."""

    def __init__(self, config: AppConfig, client: Optional[AuthentikClient] = None):
        """Initialize directory service.

        Args:
            config: Application configuration
            client: Pre-built Authentik client (built from config if omitted)

        Raises:
            ConfigurationError: If Authentik credentials are missing
        """
        self._client = client or build_authentik_client(config)

    @property
    def client(self) -> AuthentikClient:
        return self._client

    # ─────────────────────────────────────────────────────────────────────────
    # Users
    # ─────────────────────────────────────────────────────────────────────────

    def list_users(self, cursor: Optional[str]) -> Tuple[List[Dict[str, str]], str]:
        """List one page of users.

        Returns:
            (Opal users, next cursor; "" on the last page)
        """
        page = cursor_to_page(cursor)
        ctx = self._client.authenticate()
        results, next_cursor = self._call(
            "failed to list users from Authentik",
            lambda: self._list_page(ctx, "/core/users/", page),
        )
        return [OpalTransformer.user(user) for user in results], next_cursor

    # ─────────────────────────────────────────────────────────────────────────
    # Groups
    # ─────────────────────────────────────────────────────────────────────────

    def list_groups(self, cursor: Optional[str]) -> Tuple[List[Dict[str, str]], str]:
        """List one page of groups.

        Returns:
            (Opal groups, next cursor; "" on the last page)
        """
        page = cursor_to_page(cursor)
        ctx = self._client.authenticate()
        results, next_cursor = self._call(
            "failed to list groups from Authentik",
            lambda: self._list_page(ctx, "/core/groups/", page, include_users="false"),
        )
        return [OpalTransformer.group(group) for group in results], next_cursor

    def get_group(self, group_id: str) -> Dict[str, str]:
        """Fetch a single group."""
        group_id = require_group_id(group_id)
        ctx = self._client.authenticate()
        group = self._call(
            "failed to get group from Authentik",
            lambda: self._retrieve_group(ctx, group_id, include_users=False),
        )
        return OpalTransformer.group(group)

    def list_group_members(self, group_id: str) -> List[Dict[str, str]]:
        """List all users of a group.

        Authentik embeds members in the group payload, so there is no
        pagination here.
        """
        group_id = require_group_id(group_id)
        ctx = self._client.authenticate()
        members = self._call(
            "failed to get users for group from Authentik",
            lambda: self._retrieve_group(ctx, group_id, include_users=True).get("users_obj") or [],
        )
        return [OpalTransformer.group_user(member) for member in members]

    def list_member_groups(self, group_id: str) -> List[Dict[str, str]]:
        """List groups whose parent is ``group_id``.

        Uses Authentik's ``used_by`` listing and fetches each referencing
        group, so this costs one call plus one per child group.
        """
        group_id = require_group_id(group_id)
        ctx = self._client.authenticate()
        child_ids = self._call(
            "failed to get children groups for group from Authentik",
            lambda: self._child_group_ids(ctx, group_id),
        )

        member_groups = []
        for child_id in child_ids:
            child = self._call(
                "failed to get group from Authentik",
                lambda: self._retrieve_group(ctx, child_id, include_users=False),
            )
            member_groups.append(OpalTransformer.group_member_group(child))
        return member_groups

    # ─────────────────────────────────────────────────────────────────────────
    # Memberships
    # ─────────────────────────────────────────────────────────────────────────

    def add_user_to_group(self, group_id: str, user_id: str) -> None:
        """Add a user to a group.

        Raises:
            ValidationError: If user_id is not a numeric Authentik pk (no remote call)
            DirectoryError: If Authentik rejects the call
        """
        group_id = require_group_id(group_id)
        user_pk = parse_user_pk(user_id)
        ctx = self._client.authenticate()
        self._call(
            "failed to add user to group in Authentik",
            lambda: self._client.post(ctx, _group_path(group_id, "add_user/"), json={"pk": user_pk}),
        )
        logger.info("Added user %s to group %s", user_pk, group_id)

    def remove_user_from_group(self, group_id: str, user_id: str) -> None:
        """Remove a user from a group.

        Raises:
            ValidationError: If user_id is not a numeric Authentik pk (no remote call)
            DirectoryError: If Authentik rejects the call
        """
        group_id = require_group_id(group_id)
        user_pk = parse_user_pk(user_id)
        ctx = self._client.authenticate()
        self._call(
            "failed to remove user from group in Authentik",
            lambda: self._client.post(ctx, _group_path(group_id, "remove_user/"), json={"pk": user_pk}),
        )
        logger.info("Removed user %s from group %s", user_pk, group_id)

    def add_group_to_group(self, containing_group_id: str, member_group_id: str) -> None:
        """Nest ``member_group_id`` under ``containing_group_id`` (sets its parent)."""
        containing_group_id = require_group_id(containing_group_id, "group_id")
        member_group_id = require_group_id(member_group_id, "member_group_id")
        ctx = self._client.authenticate()
        self._call(
            "failed to add member group to containing group in Authentik",
            lambda: self._set_parent(ctx, member_group_id, containing_group_id),
        )
        logger.info("Set parent of group %s to %s", member_group_id, containing_group_id)

    def remove_group_from_group(self, member_group_id: str) -> None:
        """Un-nest ``member_group_id`` (clears its parent)."""
        member_group_id = require_group_id(member_group_id, "member_group_id")
        ctx = self._client.authenticate()
        self._call(
            "failed to remove member group from containing group in Authentik",
            lambda: self._set_parent(ctx, member_group_id, None),
        )
        logger.info("Cleared parent of group %s", member_group_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        """Run one directory call, translating any failure."""
        try:
            return fn()
        except DirectoryError:
            raise
        except _CALL_ERRORS as exc:
            raise translate_error(exc, operation) from exc

    def _list_page(self, ctx: AuthContext, path: str, page: int, **params: Any) -> Tuple[List[Dict[str, Any]], str]:
        query = {"page": page, "page_size": DEFAULT_PAGE_SIZE, **params}
        body = self._client.json(self._client.get(ctx, path, params=query))
        window = PageWindow.from_pagination(page, body["pagination"])
        return list(body["results"]), page_window_to_cursor(window)

    def _retrieve_group(self, ctx: AuthContext, group_id: str, include_users: bool) -> Dict[str, Any]:
        params = {"include_users": "true" if include_users else "false"}
        return self._client.json(self._client.get(ctx, _group_path(group_id), params=params))

    def _child_group_ids(self, ctx: AuthContext, group_id: str) -> List[str]:
        used_by = self._client.json(self._client.get(ctx, _group_path(group_id, "used_by/")))
        return [str(entry["pk"]) for entry in used_by if entry["model_name"] == USED_BY_GROUP_MODEL]

    def _set_parent(self, ctx: AuthContext, group_id: str, parent_id: Optional[str]) -> None:
        self._client.patch(ctx, _group_path(group_id), json={"parent": parent_id})
