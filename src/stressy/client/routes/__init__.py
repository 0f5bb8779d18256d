"""Flask route blueprints for the Stressy client application."""

from stressy.client.routes.chat import chat_bp
from stressy.client.routes.config import get_config, init_config
from stressy.client.routes.health import health_bp
from stressy.client.routes.materials import materials_bp
from stressy.client.routes.papers import papers_bp

__all__ = [
    "chat_bp",
    "health_bp",
    "materials_bp",
    "papers_bp",
    "init_config",
    "get_config",
]
