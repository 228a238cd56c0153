"""Opal ``/groups`` endpoints backed by Authentik groups.

Architecture:
    Opal ──signed HTTP──> /groups/* ──> DirectoryService ──> Authentik

Group resources are not modelled in Authentik: listing them always returns an
empty page and mutating them answers 501.
"""

from __future__ import annotations

from flask import Blueprint, jsonify

from connector.api.errors import error_response
from connector.api.helpers.request_context import cursor_arg, get_directory_service, read_json_body
from connector.core.pagination import END_OF_RESULTS
from connector.core.validators import require_field

bp = Blueprint("groups", __name__)


# ─────────────────────────────────────────────────────────────────────────────
# Groups
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/groups", methods=["GET"])
def get_groups():
    """List one page of groups.

    Returns:
        200 OK with {"groups": [{"id", "name"}], "next_cursor": "..."}
    """
    groups, next_cursor = get_directory_service().list_groups(cursor_arg())
    return jsonify({"groups": groups, "next_cursor": next_cursor}), 200


@bp.route("/groups/<group_id>", methods=["GET"])
def get_group(group_id: str):
    """Retrieve a group by its Authentik pk."""
    group = get_directory_service().get_group(group_id)
    return jsonify({"group": group}), 200


# ─────────────────────────────────────────────────────────────────────────────
# Group users
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/groups/<group_id>/users", methods=["GET"])
def get_group_users(group_id: str):
    """List the users of a group.

    Authentik does not paginate group members, so ``next_cursor`` is always
    empty.
    """
    users = get_directory_service().list_group_members(group_id)
    return jsonify({"users": users, "next_cursor": END_OF_RESULTS}), 200


@bp.route("/groups/<group_id>/users", methods=["POST"])
def add_group_user(group_id: str):
    """Add a user to a group.

    Body:
        {"user_id": "<Authentik user pk>"}
    """
    user_id = require_field(read_json_body(), "user_id")
    get_directory_service().add_user_to_group(group_id, user_id)
    return jsonify({}), 200


@bp.route("/groups/<group_id>/users/<user_id>", methods=["DELETE"])
def remove_group_user(group_id: str, user_id: str):
    """Remove a user from a group."""
    get_directory_service().remove_user_from_group(group_id, user_id)
    return jsonify({}), 200


# ─────────────────────────────────────────────────────────────────────────────
# Group nesting
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/groups/<group_id>/member-groups", methods=["GET"])
def get_group_member_groups(group_id: str):
    """List groups nested directly under a group."""
    groups = get_directory_service().list_member_groups(group_id)
    return jsonify({"groups": groups, "next_cursor": END_OF_RESULTS}), 200


@bp.route("/groups/<group_id>/member-groups", methods=["POST"])
def add_group_member_group(group_id: str):
    """Nest a group under ``group_id``.

    Body:
        {"member_group_id": "<Authentik group pk>"}
    """
    member_group_id = require_field(read_json_body(), "member_group_id")
    get_directory_service().add_group_to_group(group_id, member_group_id)
    return jsonify({}), 200


@bp.route("/groups/<group_id>/member-groups/<member_group_id>", methods=["DELETE"])
def remove_group_member_group(group_id: str, member_group_id: str):
    """Un-nest a group.

    Authentik stores nesting as the member's single parent reference, so the
    parent is cleared regardless of ``group_id``.
    """
    get_directory_service().remove_group_from_group(member_group_id)
    return jsonify({}), 200


# ─────────────────────────────────────────────────────────────────────────────
# Group resources (unsupported)
# ─────────────────────────────────────────────────────────────────────────────

@bp.route("/groups/<group_id>/resources", methods=["GET"])
def get_group_resources(group_id: str):
    """Authentik groups grant no connector resources."""
    return jsonify({"resources": [], "next_cursor": END_OF_RESULTS}), 200


@bp.route("/groups/<group_id>/resources", methods=["POST"])
@bp.route("/groups/<group_id>/resources/<resource_id>", methods=["DELETE"])
def mutate_group_resource(group_id: str, resource_id: str | None = None):
    """Resources cannot be attached to Authentik groups."""
    return error_response(501, "Group resources are not supported by the Authentik connector")
