"""Flask web application for the Stressy research assistant.

This module exposes the REST API the web client talks to: paper upload and
management, notes and whiteboard storage, and Stressy Bot queries over a
user's selected materials.
"""

import logging
import os

from flask import Flask, jsonify

from stressy.client.routes import chat_bp, health_bp, init_config, materials_bp, papers_bp
from stressy.service.bootstrap import Services, build_services
from stressy.settings import StressySettings, configure_logging

logger = logging.getLogger(__name__)


def initialize_services(settings: StressySettings | None = None) -> Services:
    """Build the pipelines and storage and hand them to the routes.

    Args:
        settings: Runtime settings (default: read from the environment)

    Returns:
        Services: The wired services
    """
    settings = settings or StressySettings.from_env()
    logger.debug(
        f"LLM service: {settings.llm_service}, model: {settings.llm_model}, "
        f"database: {settings.ravendb_database}"
    )
    services = build_services(settings)
    init_config(services=services)
    return services


def create_app(services: Services | None = None) -> Flask:
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Args:
        services: Pre-built services; built from the environment when omitted

    Returns:
        Flask: The configured Flask application instance
    """
    app = Flask(__name__)

    if services is None:
        services = initialize_services()
    else:
        init_config(services=services)

    app.config["MAX_CONTENT_LENGTH"] = services.settings.max_upload_bytes

    app.register_blueprint(papers_bp)
    app.register_blueprint(chat_bp)
    app.register_blueprint(materials_bp)
    app.register_blueprint(health_bp)

    @app.errorhandler(413)
    def file_too_large(error):
        limit_mb = services.settings.max_upload_bytes // (1024 * 1024)
        return jsonify({"success": False, "error": f"File too large (max {limit_mb} MB)"}), 413

    logger.debug("Flask app created")
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    configure_logging()
    print("🚀 Starting Stressy Flask application...")

    print("📦 Initializing services...")
    app = create_app()
    print("✅ Services initialized successfully")

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_ENV", "development") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print("📝 Press CTRL+C to quit")

    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
