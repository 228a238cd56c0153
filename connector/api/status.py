"""Status endpoint polled by Opal to check the connector is reachable."""
from flask import Blueprint, jsonify

bp = Blueprint("status", __name__)


@bp.route("/status", methods=["GET"])
def get_status():
    """Liveness check (signed like every other route)."""
    return jsonify({"status": "ok"}), 200
