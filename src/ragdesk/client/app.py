"""Flask web application serving the RAG chat API.

This module wires the pipeline into Flask: chat (JSON and server-sent
events), document indexing and a health check.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask

from ragdesk.client.routes import (
    chat_bp,
    documents_bp,
    health_bp,
    init_config,
)
from ragdesk.client.services import build_services
from ragdesk.service.database import ensure_index_exists

# Configure logging
log_level = os.getenv("LOG_LEVEL", "DEBUG")
logging.basicConfig(
    level=getattr(logging, log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
logger.debug("Environment variables loaded")

# Create Flask app
app = Flask(__name__)
logger.debug("Flask app created")

# Register blueprints
app.register_blueprint(chat_bp)
app.register_blueprint(documents_bp)
app.register_blueprint(health_bp)


def initialize_services():
    """Build the pipeline and its collaborators and hand them to the routes."""
    logger.info("🔧 Initializing services...")

    services = build_services()

    try:
        ensure_index_exists(services.store)
    except Exception as e:
        logger.warning(f"⚠️ Could not verify vector index (run ragdesk-init): {e}")

    init_config(
        pipeline=services.pipeline,
        repository=services.repository,
        vector_store=services.vector_store,
        embeddings=services.embeddings,
        history_limit=services.history_limit,
    )
    logger.info("✅ Services initialized")


def create_app():
    """Factory function for creating the Flask application.

    This function is used by WSGI servers like gunicorn to create the app.
    It initializes services before returning the app instance.

    Returns:
        Flask: The configured Flask application instance
    """
    initialize_services()
    return app


def main() -> None:
    """Entry point for the Flask application command-line interface."""
    print("🚀 Starting RagDesk Flask application...")

    print("📦 Initializing services...")
    initialize_services()
    print("✅ Services initialized successfully")

    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", "5000"))
    debug = os.getenv("FLASK_ENV", "development") == "development"

    print(f"🌐 Starting Flask server on http://{host}:{port}")
    print(f"🔧 Debug mode: {debug}")
    print("📝 Press CTRL+C to quit")

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
