"""
Customers blueprint — customer CRUD and the customer's cars and requests.
"""

from flask import Blueprint

bp = Blueprint("customers", __name__)

# Import routes after blueprint creation to avoid circular imports.
from repair_shop.blueprints.customers import routes  # noqa: E402, F401
