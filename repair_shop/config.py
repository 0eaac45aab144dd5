"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``repair_shop/__init__.py`` selects the appropriate
config based on the FLASK_ENV environment variable.

Connection strings are plain SQLAlchemy URLs.  Development and testing
default to SQLite so the project runs without a database server;
production must point ``DATABASE_URL`` at a transactional server
(PostgreSQL, SQL Server, ...).
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# Sentinel for detecting unset SECRET_KEY in production.
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


class BaseConfig:
    """
    Shared configuration values inherited by all environments.

    Secrets and connection strings are loaded from environment variables
    so they never appear in source control.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # -- SQLAlchemy --------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL", "sqlite:///repair_shop.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False

    # Echo SQL statements to the log for debugging (override per env).
    SQLALCHEMY_ECHO: bool = False

    # -- Domain rules ------------------------------------------------------
    # Inclusive bounds for Car.year.
    CAR_YEAR_MIN: int = int(os.environ.get("CAR_YEAR_MIN", "1980"))
    CAR_YEAR_MAX: int = int(os.environ.get("CAR_YEAR_MAX", "2025"))

    # Status given to a service request created without one.
    DEFAULT_REQUEST_STATUS: str = os.environ.get("DEFAULT_REQUEST_STATUS", "PENDING")

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that production settings are safe to run with.

        Raises:
            RuntimeError: If SECRET_KEY is still the insecure default or
                          the database URL points at a local SQLite file.
        """
        errors: list[str] = []

        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is still the insecure default. "
                "Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        if app_config.get("SQLALCHEMY_DATABASE_URI", "").startswith("sqlite"):
            errors.append(
                "DATABASE_URL points at SQLite. Production needs a "
                "transactional database server."
            )

        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production; "
                "customer emails and phone numbers may appear in logs."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, SQL echo enabled."""

    DEBUG: bool = True
    SQLALCHEMY_ECHO: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory SQLite, one fresh database per app.

    Flask-SQLAlchemy keeps a single connection for ``sqlite://``, so the
    database lives as long as the app's engine.  Tests that run several
    threads against the store pass a file database URL instead.
    """

    TESTING: bool = True
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    LOG_LEVEL: str = "DEBUG"
    CAR_YEAR_MIN: int = 1980
    CAR_YEAR_MAX: int = 2025
    DEFAULT_REQUEST_STATUS: str = "PENDING"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_secrets()`` at
    startup and refuses to launch if critical values are missing.
    """

    DEBUG: bool = False
    SQLALCHEMY_ECHO: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
