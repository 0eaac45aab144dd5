"""
Service requests blueprint — request CRUD, status updates and lookups.
"""

from flask import Blueprint

bp = Blueprint("service_requests", __name__)

# Import routes after blueprint creation to avoid circular imports.
from repair_shop.blueprints.service_requests import routes  # noqa: E402, F401
