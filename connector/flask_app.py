"""Flask application factory and bootstrap.

This module provides the create_app() factory function for initializing
the connector with its blueprints, request gates and configuration.
"""
from __future__ import annotations
import logging
from typing import Optional

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from connector.config import AppConfig, load_settings
from connector.core.directory_service import DirectoryService

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


# ─────────────────────────────────────────────────────────────────────────────
# Application Factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(config: Optional[AppConfig] = None, directory: Optional[DirectoryService] = None) -> Flask:
    """Create and configure the connector application.

    Args:
        config: Settings (loaded from the environment if omitted)
        directory: Directory service (built from config if omitted)

    Raises:
        ConfigurationError: If a required secret or credential is missing
    """
    cfg = config or load_settings()
    logging.basicConfig(level=cfg.log_level, format=LOG_FORMAT)

    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg

    # Fails fast when Authentik credentials are incomplete
    from connector.api.helpers.request_context import DIRECTORY_SERVICE_KEY
    app.config[DIRECTORY_SERVICE_KEY] = directory or DirectoryService(cfg)

    # Trust X-Forwarded-* headers from proxy (nginx, load balancer)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore

    # Every route is gated by the Opal signature
    from connector.api.decorators import register_signature_gate
    register_signature_gate(app, cfg.opal_signing_secret)

    # Register blueprints
    from connector.api import errors, groups, resources, status, users

    app.register_blueprint(status.bp)
    app.register_blueprint(users.bp)
    app.register_blueprint(groups.bp)
    app.register_blueprint(resources.bp)

    # Register error handlers
    errors.register_error_handlers(app)

    print(f"[flask_app] Opal connector ready; Authentik at {cfg.authentik_base_url}")
    return app
