"""
Routes for the main blueprint — API index and health check.
"""

import logging

from flask import url_for
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from repair_shop.blueprints.main import bp
from repair_shop.extensions import db, entity_cache

logger = logging.getLogger(__name__)


@bp.route("/")
def index():
    """List the collection endpoints."""
    return {
        "service": "repair-shop",
        "endpoints": {
            "customers": url_for("customers.list_customers"),
            "cars": url_for("cars.list_cars"),
            "service_centers": url_for("service_centers.list_service_centers"),
            "service_requests": url_for("service_requests.list_requests"),
        },
    }


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the database, with
    the entity cache counters attached.
    """
    cache_stats = entity_cache.coordinator.stats()
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("Health check could not reach the database: %s", exc)
        db.session.rollback()
        return {
            "status": "unhealthy",
            "database": "unreachable",
            "cache": cache_stats,
        }, 503
    return {"status": "healthy", "database": "connected", "cache": cache_stats}, 200
