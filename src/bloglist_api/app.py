"""
Flask Application Factory for bloglist-api.

This application factory wires:
- SQLAlchemy store (accounts, sessions, blogs, audit log)
- Bearer session tokens resolved before every request
- JSON blueprints under /api
- Rate limiting on the credential endpoints
"""
import logging
import os
from typing import Any, Mapping, Optional

from flask import Flask, jsonify, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from werkzeug.middleware.proxy_fix import ProxyFix

from . import errors
from .account_auth import DEFAULT_SESSION_LIFETIME, load_caller
from .api import blogs_bp, login_bp, testing_bp, users_bp
from .config_defaults import get_bool_setting, get_int_setting, get_setting
from .database import init_db
from .logging_config import configure_logging
from .models import db

logger = logging.getLogger(__name__)

TEST_ENVIRONMENTS = ('test', 'local_test')


def _testing_api_enabled(flask_env: str) -> bool:
    return flask_env in TEST_ENVIRONMENTS or get_bool_setting('ENABLE_TESTING_API')


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        overrides: Config values applied after the environment-driven
            defaults (tests pass SQLALCHEMY_DATABASE_URI, TESTING, ...)

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    # Trust proxy headers (for reverse proxy deployments)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)

    # =========================================================================
    # Configuration
    # =========================================================================

    flask_env = get_setting('FLASK_ENV', 'production')

    app.config['MAX_CONTENT_LENGTH'] = get_int_setting('MAX_CONTENT_LENGTH', 1024 * 1024)
    app.config['SESSION_LIFETIME'] = get_int_setting('SESSION_LIFETIME', DEFAULT_SESSION_LIFETIME)
    app.config['ENABLE_TESTING_API'] = _testing_api_enabled(flask_env)
    app.config['RATELIMIT_ENABLED'] = flask_env not in TEST_ENVIRONMENTS

    if overrides:
        app.config.update(overrides)

    # =========================================================================
    # Database Initialization
    # =========================================================================

    init_db(app)

    # =========================================================================
    # Rate Limiting
    # =========================================================================

    if app.config['RATELIMIT_ENABLED'] and not app.config.get('TESTING'):
        limiter = Limiter(
            key_func=get_remote_address,
            app=app,
            default_limits=[get_setting('RATELIMIT_DEFAULT', '200 per hour;50 per minute')],
            storage_uri="memory://",
        )

        # Stricter limits on the credential endpoints
        auth_limit = get_setting('RATELIMIT_AUTH', '10 per minute')
        limiter.limit(auth_limit)(users_bp)
        limiter.limit(auth_limit)(login_bp)
    else:
        logger.info(f"Rate limiting disabled for {flask_env} environment")

    # =========================================================================
    # Caller Resolution
    # =========================================================================

    app.before_request(load_caller)

    # =========================================================================
    # Register Blueprints
    # =========================================================================

    app.register_blueprint(users_bp)
    app.register_blueprint(login_bp)
    app.register_blueprint(blogs_bp)

    if app.config['ENABLE_TESTING_API']:
        app.register_blueprint(testing_bp)
        logger.warning("Testing API enabled: POST /api/testing/reset wipes all data")

    # =========================================================================
    # Error Handlers
    # =========================================================================

    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith('/api/'):
            return jsonify({'error': 'not_found', 'message': 'Endpoint not found'}), 404
        return "Not Found", 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        if request.path.startswith('/api/'):
            return jsonify({'error': 'method_not_allowed', 'message': 'Method not allowed'}), 405
        return "Method Not Allowed", 405

    @app.errorhandler(413)
    def payload_too_large(e):
        return jsonify({'error': 'invalid_input', 'message': 'Request body too large'}), 413

    @app.errorhandler(429)
    def rate_limited(e):
        logger.warning(f"Rate limit exceeded for {request.remote_addr} on {request.path}")
        return errors.error_response(errors.RATE_LIMITED, f"Rate limit exceeded: {e.description}")

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error")
        db.session.rollback()
        if request.path.startswith('/api/'):
            return jsonify({'error': 'internal', 'message': 'Internal server error'}), 500
        return "Internal Server Error", 500

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.route('/health')
    def health():
        """Health check endpoint."""
        return jsonify({'status': 'ok'})

    logger.info("Flask application created successfully")

    return app


def main():
    """Run the development server (use gunicorn + wsgi.py in production)."""
    configure_logging()

    host = os.environ.get('HOST', '127.0.0.1')
    port = int(os.environ.get('PORT', '3003'))
    debug = get_bool_setting('FLASK_DEBUG')

    app = create_app()
    logger.info(f"Starting bloglist-api on {host}:{port}")
    app.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
