"""Opal ``/resources`` endpoints.

Authentik exposes no resources to Opal; every resource route answers 501 so
Opal reports the capability as unsupported instead of silently succeeding.
"""
from flask import Blueprint

from connector.api.errors import error_response

bp = Blueprint("resources", __name__)

NOT_SUPPORTED = "Resources are not supported by the Authentik connector"


@bp.route("/resources", methods=["GET"])
@bp.route("/resources/<resource_id>", methods=["GET"])
@bp.route("/resources/<resource_id>/access_levels", methods=["GET"])
@bp.route("/resources/<resource_id>/users", methods=["GET", "POST"])
@bp.route("/resources/<resource_id>/users/<user_id>", methods=["DELETE"])
def resources_not_supported(**_ids):
    return error_response(501, NOT_SUPPORTED)
