"""Opal ``/users`` endpoint."""
from __future__ import annotations
import logging

from flask import Blueprint, jsonify

from connector.api.helpers.request_context import cursor_arg, get_directory_service

bp = Blueprint("users", __name__)

logger = logging.getLogger(__name__)


@bp.route("/users", methods=["GET"])
def get_users():
    """List one page of Authentik users.

    Query parameters:
        - cursor: page token from a previous response (default: first page)

    Returns:
        200 OK with {"users": [{"id", "email"}], "next_cursor": "..."}
    """
    users, next_cursor = get_directory_service().list_users(cursor_arg())
    logger.debug("Listed %d users (next_cursor=%r)", len(users), next_cursor)
    return jsonify({"users": users, "next_cursor": next_cursor}), 200
