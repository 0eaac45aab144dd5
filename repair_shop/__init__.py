"""
Application factory for the repair-shop backend.

Usage::

    from repair_shop import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os

from flask import Flask, jsonify
from sqlalchemy import event
from werkzeug.exceptions import HTTPException

from .config import config_by_name
from .exceptions import ServiceError
from .extensions import db, entity_cache, migrate

logger = logging.getLogger(__name__)


def create_app(
    config_name: str | None = None, overrides: dict | None = None
) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: One of 'development', 'testing', or 'production'.
                     Defaults to the FLASK_ENV environment variable,
                     falling back to 'development'.
        overrides:   Config values applied on top of the class, before
                     any extension is initialized (tests use this to
                     point at a file database).

    Returns:
        A fully configured Flask application instance.
    """
    # Resolve the configuration class.
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name)
    if config_class is None:
        raise ValueError(
            f"Unknown config '{config_name}'. "
            f"Valid options: {list(config_by_name.keys())}"
        )

    app = Flask(__name__)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)

    # Keep API responses in field order (id first).
    app.json.sort_keys = False

    # Safety check: refuse to run production with unsafe settings.
    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    # -- Configure logging -------------------------------------------------
    _configure_logging(app)

    # -- Initialize extensions ---------------------------------------------
    _register_extensions(app)

    # -- Register blueprints -----------------------------------------------
    _register_blueprints(app)

    # -- Register error handlers -------------------------------------------
    _register_error_handlers(app)

    # -- Register custom CLI commands --------------------------------------
    _register_cli_commands(app)

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all Flask extensions to the application instance."""
    db.init_app(app)
    migrate.init_app(app, db)
    entity_cache.init_app(app)

    # SQLite ignores foreign keys unless asked per connection.
    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite"):
        with app.app_context():
            event.listen(db.engine, "connect", _enable_sqlite_foreign_keys)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):  # pylint: disable=unused-argument
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _register_blueprints(app: Flask) -> None:
    """
    Import and register each blueprint with its URL prefix.

    Blueprints are imported inside this function to avoid circular
    imports — models and services can safely import ``db`` from
    extensions at module level.
    """
    # pylint: disable=import-outside-toplevel

    # Main blueprint — API index and health check.
    from .blueprints.main import bp as main_bp

    app.register_blueprint(main_bp)

    # Customers — CRUD plus the customer's cars and requests.
    from .blueprints.customers import bp as customers_bp

    app.register_blueprint(customers_bp, url_prefix="/api/customers")

    # Cars — CRUD, ownership transfer, service-center registration.
    from .blueprints.cars import bp as cars_bp

    app.register_blueprint(cars_bp, url_prefix="/api/cars")

    # Service centers — CRUD plus attached cars and requests.
    from .blueprints.service_centers import bp as service_centers_bp

    app.register_blueprint(service_centers_bp, url_prefix="/api/service-centers")

    # Service requests — CRUD, status updates, lookups by parent.
    from .blueprints.service_requests import bp as service_requests_bp

    app.register_blueprint(service_requests_bp, url_prefix="/api/requests")


def _register_error_handlers(app: Flask) -> None:
    """Register JSON error responses for service failures and HTTP errors."""

    @app.errorhandler(ServiceError)
    def service_error(error):
        """NotFound / Conflict / InvalidInput raised by the service layer."""
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Unknown routes, wrong methods and other werkzeug errors."""
        body = {
            "error": error.name.lower().replace(" ", "_"),
            "message": error.description,
        }
        return jsonify(body), error.code

    @app.errorhandler(Exception)
    def internal_error(error):
        """Handle unexpected failures without leaking internal details."""
        db.session.rollback()
        logger.exception("Unhandled error: %s", error)
        return (
            jsonify(
                {
                    "error": "server_error",
                    "message": "An unexpected error occurred.",
                }
            ),
            500,
        )


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask db-check)."""
    from .cli import register_commands  # pylint: disable=import-outside-toplevel

    register_commands(app)


def _configure_logging(app: Flask) -> None:
    """
    Set up application logging at the configured ``LOG_LEVEL``.

    In development SQL echo is left to ``SQLALCHEMY_ECHO``; the engine
    logger is quieted otherwise so cache hit/miss lines stay readable.
    """
    log_level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("repair_shop").setLevel(log_level)

    # Quiet down noisy libraries.
    if not app.config.get("SQLALCHEMY_ECHO"):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
