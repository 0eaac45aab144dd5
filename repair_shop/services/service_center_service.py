"""
Service center service — CRUD for service centers and the cars and
requests attached to them.
"""

from repair_shop.cache.kinds import (
    CARS_BY_SERVICE_CENTER,
    REQUESTS_BY_SERVICE_CENTER,
    SERVICE_CENTER,
)
from repair_shop.extensions import entity_cache
from repair_shop.services import validation


def _clean(data: dict) -> dict:
    data = validation.require_payload(data)
    return {
        "name": validation.require_text(data, "name", max_length=200),
        "address": validation.require_text(data, "address", max_length=300),
        "phone": validation.require_phone(data),
    }


def get_all():
    return entity_cache.coordinator.find_all(SERVICE_CENTER)


def get_by_id(service_center_id: int):
    return entity_cache.coordinator.find_by_id(SERVICE_CENTER, service_center_id)


def get_by_name(name: str):
    return entity_cache.coordinator.find_by_key(SERVICE_CENTER, "name", name.strip())


def get_cars_for_service_center(service_center_id: int):
    """Return the cars registered at a service center."""
    return entity_cache.coordinator.children(CARS_BY_SERVICE_CENTER, service_center_id)


def get_requests_by_service_center_id(service_center_id: int):
    return entity_cache.coordinator.children(
        REQUESTS_BY_SERVICE_CENTER, service_center_id
    )


def create(data: dict):
    """
    Create a service center.

    Raises:
        InvalidInputError: A field is missing, blank or malformed.
        ConflictError:     The name, address or phone is already in use.
    """
    return entity_cache.coordinator.create(SERVICE_CENTER, _clean(data))


def update(service_center_id: int, data: dict):
    return entity_cache.coordinator.update(
        SERVICE_CENTER, service_center_id, _clean(data)
    )


def delete(service_center_id: int) -> None:
    """
    Delete a service center, its service requests and its car
    registrations.  The cars and customers themselves stay.
    """
    entity_cache.coordinator.delete(SERVICE_CENTER, service_center_id)
