"""
Customer service — CRUD for customers and their relationship views.

Functions take plain dicts (decoded JSON bodies) and return immutable
``CustomerRecord`` / ``CarRecord`` / ``ServiceRequestRecord`` snapshots.
All reads and writes go through the consistency coordinator, so the
cache and the store never disagree from a caller's point of view.
"""

from repair_shop.cache.kinds import CARS_BY_CUSTOMER, CUSTOMER, REQUESTS_BY_CUSTOMER
from repair_shop.extensions import entity_cache
from repair_shop.services import validation


def _clean(data: dict) -> dict:
    """Validate a full customer payload (create and update are both full writes)."""
    data = validation.require_payload(data)
    return {
        "first_name": validation.require_text(data, "first_name", max_length=100),
        "last_name": validation.require_text(data, "last_name", max_length=100),
        "email": validation.require_email(data),
        "phone": validation.require_phone(data),
    }


# -- Queries ---------------------------------------------------------------


def get_all():
    """Return every customer ordered by id."""
    return entity_cache.coordinator.find_all(CUSTOMER)


def get_by_id(customer_id: int):
    """
    Return one customer.

    Raises:
        NotFoundError: If no customer has that id.
    """
    return entity_cache.coordinator.find_by_id(CUSTOMER, customer_id)


def get_by_email(email: str):
    """Look a customer up by email (case-insensitive)."""
    return entity_cache.coordinator.find_by_key(CUSTOMER, "email", email.strip().lower())


def get_cars_by_customer_id(customer_id: int):
    """Return the cars currently owned by a customer, ordered by id."""
    return entity_cache.coordinator.children(CARS_BY_CUSTOMER, customer_id)


def get_requests_by_customer_id(customer_id: int):
    """Return the service requests placed by a customer."""
    return entity_cache.coordinator.children(REQUESTS_BY_CUSTOMER, customer_id)


# -- Mutations -------------------------------------------------------------


def create(data: dict):
    """
    Create a customer.

    Raises:
        InvalidInputError: A field is missing, blank or malformed.
        ConflictError:     The email or phone is already in use.
    """
    return entity_cache.coordinator.create(CUSTOMER, _clean(data))


def update(customer_id: int, data: dict):
    """
    Replace a customer's fields.

    Raises:
        InvalidInputError: A field is missing, blank or malformed.
        NotFoundError:     No customer has that id.
        ConflictError:     The new email or phone belongs to another customer.
    """
    return entity_cache.coordinator.update(CUSTOMER, customer_id, _clean(data))


def delete(customer_id: int) -> None:
    """
    Delete a customer together with its cars and every service request
    placed by it or made for one of its cars.
    """
    entity_cache.coordinator.delete(CUSTOMER, customer_id)
