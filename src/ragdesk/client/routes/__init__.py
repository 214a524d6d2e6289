"""Flask route blueprints for the ragdesk client application."""

from ragdesk.client.routes.chat import chat_bp
from ragdesk.client.routes.config import get_config, init_config
from ragdesk.client.routes.documents import documents_bp
from ragdesk.client.routes.health import health_bp

__all__ = [
    "chat_bp",
    "documents_bp",
    "health_bp",
    "init_config",
    "get_config",
]
