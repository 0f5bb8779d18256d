"""Health check route."""

from flask import Blueprint, jsonify

from stressy.client.routes.config import get_config

health_bp = Blueprint("health", __name__)


@health_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint.

    Returns:
        JSON with service status. ``embeddings`` is "fallback" when no
        provider is configured.
    """
    services = get_config().services
    llm_service = services.llm_service if services else None
    return jsonify(
        {
            "status": "healthy",
            "services": "initialized" if services else "not initialized",
            "llm_service": type(llm_service).__name__ if llm_service else None,
            "embeddings": "provider" if llm_service else "fallback",
        }
    )
