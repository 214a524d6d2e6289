"""Health check API route."""

from flask import Blueprint, jsonify

from ragdesk.client.routes.config import get_config

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status
    """
    return jsonify(
        {
            "status": "healthy",
            "pipeline": "initialized" if get_config().pipeline else "not initialized",
        }
    )
