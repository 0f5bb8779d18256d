"""Shared configuration for route modules."""

from dataclasses import dataclass, field

from flask import jsonify, request

from stressy.service.bootstrap import Services

OWNER_HEADER = "X-User-Id"


@dataclass
class RouteConfig:
    """Configuration container for Flask route dependencies.

    This replaces global variables with a proper configuration object
    that can be passed around and tested more easily.
    """

    services: Services | None = None
    allowed_extensions: set[str] = field(default_factory=lambda: {"pdf", "txt", "md"})


# Single shared config instance
_config = RouteConfig()


def get_config() -> RouteConfig:
    """Get the shared route configuration.

    Returns:
        RouteConfig instance with current settings
    """
    return _config


def init_config(services: Services | None = None) -> None:
    """Initialize the shared route configuration.

    Args:
        services: Wired Stressy services
    """
    if services is not None:
        _config.services = services


def current_owner() -> str | None:
    """Owner id of the current request, from the X-User-Id header."""
    owner_id = request.headers.get(OWNER_HEADER, "").strip()
    return owner_id or None


def unauthorized():
    return jsonify({"error": "Unauthorized"}), 401
