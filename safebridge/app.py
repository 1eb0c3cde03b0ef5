# SPDX-License-Identifier: Apache-2.0

"""
SafeBridge API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support, wires the
state store, middleware and route blueprints, and exposes the health check.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag

from . import __version__
from .middleware.error_handler import ErrorHandlerMiddleware
from .middleware.role_context import RoleContextMiddleware
from .observability.config import setup_observability
from .observability.middleware import add_observability_middleware
from .routes import BLUEPRINTS
from .services.hal import create_hal_formatter
from .services.persistence import STORAGE_KEY, create_backend
from .services.store import StateStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "safebridge-api"

info = Info(
    title="SafeBridge API",
    version=__version__,
    description="Support portal for survivors of domestic violence, counsellors, legal advisors and admins"
)

HEALTH_TAG = Tag(name="Health", description="System health and status")

tags = [
    Tag(name="Session", description="Role selection, overview and quick exit"),
    Tag(name="Cases", description="Help request lifecycle"),
    Tag(name="Resources", description="Helplines, shelters and other support services"),
    Tag(name="Legal", description="Legal rights and statutes"),
    Tag(name="Users", description="Operator directory"),
    HEALTH_TAG
]


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == 'true'


def load_config() -> Dict[str, Any]:
    """Read application configuration from environment variables."""
    return {
        'ENVIRONMENT': os.getenv('ENVIRONMENT', 'development'),
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000'),
        'SNAPSHOT_BACKEND': os.getenv('SNAPSHOT_BACKEND', 'memory'),
        'SNAPSHOT_PATH': os.getenv('SNAPSHOT_PATH', ''),
        'REDIS_URL': os.getenv('REDIS_URL', 'redis://localhost:6379'),
        'SNAPSHOT_KEY': os.getenv('SNAPSHOT_KEY', STORAGE_KEY),
        'SEED_ON_EMPTY': _env_flag('SEED_ON_EMPTY', 'true'),
        'OTEL_ENABLED': _env_flag('OTEL_ENABLED', 'true'),
        'QUICK_EXIT_URL': os.getenv('QUICK_EXIT_URL', 'https://www.google.com/'),
    }


def create_store(config: Dict[str, Any]) -> StateStore:
    """Build the state store for the configured snapshot backend."""
    backend = create_backend(
        config['SNAPSHOT_BACKEND'],
        path=config.get('SNAPSHOT_PATH') or None,
        redis_url=config.get('REDIS_URL'),
        key=config.get('SNAPSHOT_KEY', STORAGE_KEY)
    )
    return StateStore(backend, seed_on_empty=config['SEED_ON_EMPTY'])


def create_app(config: Optional[Dict[str, Any]] = None, store: Optional[StateStore] = None) -> OpenAPI:
    """
    Create the Flask application.

    Args:
        config: Overrides for the environment configuration
        store: Pre-built state store (built from configuration when omitted)

    Returns:
        Configured OpenAPI application
    """
    settings = load_config()
    settings.update(config or {})

    setup_observability(
        environment=settings['ENVIRONMENT'],
        enabled=settings['OTEL_ENABLED'],
        service_version=__version__
    )

    app = OpenAPI(__name__, info=info)
    app.config.update(settings)
    app.config['DEBUG'] = app.config['ENVIRONMENT'] == 'development'

    add_observability_middleware(app)

    if store is None:
        store = create_store(app.config)

    hal_formatter = create_hal_formatter(app.config['BASE_URL'])

    # Make services available to routes
    app.state_store = store
    app.hal_formatter = hal_formatter
    app.role_context = RoleContextMiddleware(store)
    app.error_handler = ErrorHandlerMiddleware(app, hal_formatter)

    for blueprint in BLUEPRINTS:
        app.register_api(blueprint)

    @app.get("/api/healthz", tags=[HEALTH_TAG])
    def health_check():
        """Health check with snapshot backend details."""
        snapshot = app.state_store.snapshot
        health_data = {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": __version__,
            "environment": app.config['ENVIRONMENT'],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "snapshot": {
                "backend": app.state_store.backend.name,
                "schemaVersion": snapshot.schema_version
            }
        }
        links = {"self": hal_formatter.builder.link_builder.build_link("/api/healthz", title="Self")}
        return jsonify(hal_formatter.builder.build_resource_response(health_data, links))

    logger.info(
        "Application created",
        extra={
            "environment": app.config['ENVIRONMENT'],
            "snapshot_backend": store.backend.name
        }
    )

    return app


if __name__ == '__main__':
    application = create_app()
    application.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=application.config['DEBUG']
    )
