"""Flask application factory."""

from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS

from services.config import load_config


def create_app(config=None):
    """Create and configure the Flask application.

    Args:
        config: Optional DashboardConfig; loaded from file and environment
            when omitted
    """
    app = Flask(__name__)

    # Enable CORS for frontend
    CORS(app, resources={
        r"/api/*": {
            "origins": ["http://localhost:5173", "http://127.0.0.1:5173"],
            "methods": ["GET", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })

    if config is None:
        config = load_config()
    app.config["DASHBOARD_CONFIG"] = config

    if config.auth_enabled:
        app.logger.info("Basic authentication enabled")
    else:
        app.logger.info("AUTH_USERNAME/AUTH_PASSWORD not set, authentication disabled")
    if config.teams:
        app.logger.info(f"Loaded {len(config.teams)} teams")

    # Register blueprints
    from app.api import auth, data
    app.register_blueprint(auth.bp)
    app.register_blueprint(data.bp)

    # Health check endpoint
    @app.route("/health")
    def health():
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Not found"}), 404

    return app
