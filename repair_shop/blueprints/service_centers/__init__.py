"""
Service centers blueprint — service center CRUD and attached cars and requests.
"""

from flask import Blueprint

bp = Blueprint("service_centers", __name__)

# Import routes after blueprint creation to avoid circular imports.
from repair_shop.blueprints.service_centers import routes  # noqa: E402, F401
