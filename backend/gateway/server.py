"""
API gateway: combines the auth, events, participants, comments and shares
blueprints. This is the local entrypoint for development.
"""

import logging
from typing import Dict, Any, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from backend.config import load_config
from backend.errors import register_error_handlers

logger = logging.getLogger(__name__)

EVENT_SCOPED_PREFIX = "/api/events/<int:event_id>"


def configure_logging(level: str) -> None:
    """
    Basic console logging during API requests.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[%(levelname)s] %(asctime)s - %(name)s - %(message)s",
    )


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        overrides (dict, optional): Config values that win over the environment.

    Returns:
        Flask: The configured Flask application.

    Raises:
        RuntimeError: If JWT_SECRET is not configured.
    """
    settings = load_config(overrides)
    configure_logging(settings["LOG_LEVEL"])

    app = Flask(__name__)
    app.config.update(settings)
    # "/api/events" and "/api/events/" reach the same view.
    app.url_map.strict_slashes = False

    CORS(app, resources={
        r"/api/*": {
            "origins": settings["CORS_ORIGINS"],
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
        }
    })

    register_error_handlers(app)

    # --- REGISTER BLUEPRINTS ---
    from backend.auth_service.routes import auth_bp
    from backend.events_service.routes import events_bp
    from backend.participants_service.routes import participants_bp
    from backend.comments_service.routes import comments_bp
    from backend.shares_service.routes import shares_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(events_bp, url_prefix="/api/events")
    app.register_blueprint(participants_bp, url_prefix=f"{EVENT_SCOPED_PREFIX}/participants")
    app.register_blueprint(comments_bp, url_prefix=f"{EVENT_SCOPED_PREFIX}/comments")
    app.register_blueprint(shares_bp, url_prefix=f"{EVENT_SCOPED_PREFIX}/shares")

    logger.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"status": "gateway_ok"}), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=app.config["GATEWAY_PORT"], debug=False)
