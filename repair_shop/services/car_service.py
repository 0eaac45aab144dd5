"""
Car service — CRUD for cars, ownership transfer and service-center
registration.

A car always belongs to exactly one customer.  Moving it to another
customer goes through ``transfer_ownership`` so both customers' car
views are updated with the store write; a plain ``update`` that changes
``customer_id`` is handled the same way by the coordinator.
"""

import logging

from repair_shop.cache.kinds import CAR, SERVICE_CENTERS_BY_CAR
from repair_shop.exceptions import InvalidInputError
from repair_shop.extensions import entity_cache
from repair_shop.services import validation

logger = logging.getLogger(__name__)


def _clean(data: dict) -> dict:
    data = validation.require_payload(data)
    return {
        "brand": validation.require_text(data, "brand", max_length=100),
        "model": validation.require_text(data, "model", max_length=100),
        "vin": validation.require_text(data, "vin", max_length=32).upper(),
        "year": validation.require_year(data),
        "customer_id": validation.require_id(data, "customer_id"),
    }


# -- Queries ---------------------------------------------------------------


def get_all():
    """Return every car ordered by id."""
    return entity_cache.coordinator.find_all(CAR)


def get_by_id(car_id: int):
    """
    Return one car.

    Raises:
        NotFoundError: If no car has that id.
    """
    return entity_cache.coordinator.find_by_id(CAR, car_id)


def get_by_vin(vin: str):
    """Look a car up by VIN (case-insensitive)."""
    return entity_cache.coordinator.find_by_key(CAR, "vin", vin.strip().upper())


def get_service_centers_for_car(car_id: int):
    """Return the service centers a car is registered at."""
    return entity_cache.coordinator.children(SERVICE_CENTERS_BY_CAR, car_id)


# -- Mutations -------------------------------------------------------------


def create(data: dict):
    """
    Create a car for an existing customer.

    Raises:
        InvalidInputError: A field is missing or the year is out of range.
        NotFoundError:     ``customer_id`` does not exist.
        ConflictError:     The VIN is already registered.
    """
    return entity_cache.coordinator.create(CAR, _clean(data))


def create_bulk(items, year_filter: int | None = None):
    """
    Create several cars.  With ``year_filter`` set, only the cars of
    exactly that model year are created; the others are skipped.

    Every item is validated before the first one is written, so a
    malformed item rejects the whole batch.  Each accepted car is then
    created on its own; a store failure part-way leaves the cars created
    before it in place.

    Returns:
        The created cars, in input order.
    """
    if not isinstance(items, list):
        raise InvalidInputError("Request body must be a JSON array of cars")
    cleaned = [_clean(item) for item in items]
    if year_filter is not None:
        cleaned = [fields for fields in cleaned if fields["year"] == year_filter]

    created = [entity_cache.coordinator.create(CAR, fields) for fields in cleaned]
    logger.info(
        "Bulk created %d of %d car(s)%s",
        len(created),
        len(items),
        f" (year == {year_filter})" if year_filter is not None else "",
    )
    return created


def update(car_id: int, data: dict):
    """
    Replace a car's fields.

    Raises:
        InvalidInputError: A field is missing or the year is out of range.
        NotFoundError:     The car or the new ``customer_id`` does not exist.
        ConflictError:     The new VIN belongs to another car.
    """
    return entity_cache.coordinator.update(CAR, car_id, _clean(data))


def delete(car_id: int) -> None:
    """Delete a car, its service requests and its service-center links."""
    entity_cache.coordinator.delete(CAR, car_id)


def transfer_ownership(car_id: int, new_customer_id: int):
    """
    Move a car to another customer in a single store transaction.

    Raises:
        NotFoundError: The car or the new owner does not exist.
    """
    return entity_cache.coordinator.transfer_ownership(car_id, new_customer_id)


def add_to_service_center(car_id: int, service_center_id: int):
    """Register a car at a service center; repeating the call is a no-op."""
    return entity_cache.coordinator.link_service_center(car_id, service_center_id)


def remove_from_service_center(car_id: int, service_center_id: int):
    """
    Remove a car's registration at a service center.

    Raises:
        NotFoundError: Either entity is missing, or the car is not
                       registered there.
    """
    return entity_cache.coordinator.unlink_service_center(car_id, service_center_id)
