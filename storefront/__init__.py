"""Flask application factory."""
from flask import Flask, request, jsonify
from flask_wtf.csrf import CSRFProtect
from storefront.database import init_db
import os


def create_app(config_object='config.Config'):
    """Create and configure the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize CSRF protection
    csrf = CSRFProtect(app)

    from flask_wtf.csrf import CSRFError

    @app.errorhandler(CSRFError)
    def handle_csrf_error(e):
        app.logger.warning(f"CSRF Error: {e.description}")
        return jsonify({'status': 'error', 'code': 'CSRF', 'message': 'Session expired. Reload the page.'}), 400

    # Sentry error tracking in production
    if os.getenv('SENTRY_DSN') and app.config.get('ENV') == 'production':
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration

        sentry_sdk.init(
            dsn=os.getenv('SENTRY_DSN'),
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            environment=os.getenv('FLASK_ENV', 'production'),
            release=os.getenv('GIT_COMMIT', 'unknown')
        )

    # Redis cache for catalog snapshots
    from storefront.services.cache_service import init_cache
    init_cache(app)

    # Production: Enable ProxyFix for HTTPS behind Nginx reverse proxy
    if app.config.get('ENV') == 'production':
        from werkzeug.middleware.proxy_fix import ProxyFix
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=0)

    # Initialize database
    init_db(app)

    # Shopper context before each request
    from storefront.middleware import load_shopper

    @app.before_request
    def before_request_handler():
        """Load shopper context for each request."""
        load_shopper()

    # Error Handlers
    from storefront.exceptions import StorefrontError

    @app.errorhandler(StorefrontError)
    def handle_storefront_error(error):
        """Typed application errors become JSON results."""
        if error.status_code >= 500:
            app.logger.error(f"StorefrontError [{error.status_code}] {error.code}: {error.message}")
        else:
            app.logger.info(f"StorefrontError [{error.status_code}] {error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def http_error(error):
        code = error.name.upper().replace(' ', '_')
        return jsonify({'status': 'error', 'code': code, 'message': error.description}), error.code

    @app.errorhandler(500)
    @app.errorhandler(Exception)
    def internal_error(error):
        app.logger.error(f"Unhandled Exception on {request.path}: {error}", exc_info=error)
        return jsonify({'status': 'error', 'code': 'INTERNAL_ERROR', 'message': 'Internal Server Error'}), 500

    # Register blueprints
    from storefront.blueprints.products import products_bp
    from storefront.blueprints.cart import cart_bp
    from storefront.blueprints.favorites import favorites_bp

    app.register_blueprint(products_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(favorites_bp)

    # Register CLI commands
    from storefront.cli_commands import init_cli_commands
    init_cli_commands(app)

    app.logger.info(f"Storefront ready (cache={'on' if app.config.get('CACHE_ENABLED') else 'off'}, "
                    f"language={app.config.get('DEFAULT_LANGUAGE')})")

    return app
