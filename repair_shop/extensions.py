"""
Flask extension instances.

Extensions are created here without binding to an application so that
the application factory can call ``init_app()`` on each one during
``create_app()``.  This avoids circular imports and follows the
standard Flask extension pattern.
"""

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from repair_shop.cache.manager import CacheManager

# -- Database ORM ----------------------------------------------------------
# The ``db`` instance is imported by models and repositories.
db = SQLAlchemy()

# -- Schema migrations (Alembic via Flask-Migrate) -------------------------
migrate = Migrate()

# -- Entity cache ------------------------------------------------------------
# Holds no state itself; ``init_app`` builds one cache registry per
# application and stores it in ``app.extensions``.
entity_cache = CacheManager()
