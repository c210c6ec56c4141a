"""Flask application factory."""

from flask import Flask, jsonify

from clickflow.config import ServiceConfig, load_config
from clickflow.core.browser import SessionFactory, browser_session
from clickflow.core.logging import set_log_level
from clickflow.server.responses import timestamp
from clickflow.server.routes import api_bp

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    config: ServiceConfig | None = None,
    session_factory: SessionFactory = browser_session,
) -> Flask:
    """Create the clickflow Flask app.

    Args:
        config: Service configuration; loaded from the environment if None.
        session_factory: Context manager factory yielding browser sessions.
            Tests substitute a fake here.

    Returns:
        The configured Flask app.
    """
    config = config or load_config()
    set_log_level(config.log_level)

    app = Flask(__name__)
    app.config["CLICKFLOW"] = config
    app.extensions["clickflow.session_factory"] = session_factory
    app.register_blueprint(api_bp)

    @app.after_request
    def add_cors_headers(response):
        for name, value in CORS_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"success": False, "message": "Not found", "timestamp": timestamp()}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"success": False, "message": "Method not allowed", "timestamp": timestamp()}), 405

    return app
