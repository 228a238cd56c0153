"""Authentik → Opal data transformations.

Opal identifies users and groups by whatever id the connector hands it and
sends the same id back on later calls. The connector uses Authentik primary
keys for both:

- users: the numeric ``pk``, rendered as a string
- groups: the group ``pk`` (a UUID)

Authentik groups have no description, so none is ever emitted.

Usage:
    opal_user = OpalTransformer.user(ak_user)
    opal_group = OpalTransformer.group(ak_group)
"""
from __future__ import annotations
from typing import Any, Dict


class OpalTransformer:
    """Maps Authentik representations to Opal connector payloads."""

    @staticmethod
    def user(ak_user: Dict[str, Any]) -> Dict[str, str]:
        """Convert an Authentik user to an Opal ``User``.

        Example:
            >>> OpalTransformer.user({"pk": 42, "username": "alice", "email": "alice@example.com"})
            {'id': '42', 'email': 'alice@example.com'}
        """
        return {
            "id": str(ak_user["pk"]),
            "email": ak_user.get("email") or "",
        }

    @staticmethod
    def group(ak_group: Dict[str, Any]) -> Dict[str, str]:
        """Convert an Authentik group to an Opal ``Group``."""
        return {
            "id": str(ak_group["pk"]),
            "name": ak_group.get("name") or "",
        }

    @staticmethod
    def group_user(ak_member: Dict[str, Any]) -> Dict[str, str]:
        """Convert an entry of Authentik's ``users_obj`` to an Opal ``GroupUser``."""
        return {
            "user_id": str(ak_member["pk"]),
            "email": ak_member.get("email") or "",
        }

    @staticmethod
    def group_member_group(ak_group: Dict[str, Any]) -> Dict[str, str]:
        """Convert a child Authentik group to an Opal ``GroupMemberGroup``."""
        return {"group_id": str(ak_group["pk"])}
