"""
Cars blueprint — car CRUD, ownership transfer and service-center registration.
"""

from flask import Blueprint

bp = Blueprint("cars", __name__)

# Import routes after blueprint creation to avoid circular imports.
from repair_shop.blueprints.cars import routes  # noqa: E402, F401
