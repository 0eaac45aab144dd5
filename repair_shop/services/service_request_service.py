"""
Service request service — requests for work on a car at a service
center.

A request references exactly one car, one customer and one service
center, all of which must exist when it is written.  The customer does
not have to be the car's current owner (a previous owner's requests
keep their customer after an ownership transfer).  ``status`` is a
free-form token; new requests start at ``DEFAULT_REQUEST_STATUS``.
"""

import logging

from flask import current_app

from repair_shop.cache.kinds import REQUESTS_BY_CAR, SERVICE_REQUEST
from repair_shop.extensions import entity_cache
from repair_shop.services import validation

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = ("car_id", "customer_id", "service_center_id")


def _clean_status(data: dict) -> str:
    return validation.require_text(data, "status", max_length=50)


def _status_or_default(data: dict) -> str:
    status = data.get("status")
    if status is None or (isinstance(status, str) and not status.strip()):
        return current_app.config["DEFAULT_REQUEST_STATUS"]
    return _clean_status(data)


# -- Queries ---------------------------------------------------------------


def get_all():
    return entity_cache.coordinator.find_all(SERVICE_REQUEST)


def get_by_id(request_id: int):
    """
    Return one service request.

    Raises:
        NotFoundError: If no request has that id.
    """
    return entity_cache.coordinator.find_by_id(SERVICE_REQUEST, request_id)


def get_requests_by_car_id(car_id: int):
    return entity_cache.coordinator.children(REQUESTS_BY_CAR, car_id)


# -- Mutations -------------------------------------------------------------


def create(data: dict):
    """
    Create a request from a full payload.

    ``status`` is optional; when absent or blank it defaults to
    ``DEFAULT_REQUEST_STATUS``.  ``created_at`` is an optional ISO-8601
    timestamp and defaults to the time of creation.

    Raises:
        InvalidInputError: The description or a reference id is missing, or
                           ``created_at`` is not an ISO-8601 timestamp.
        NotFoundError:     A referenced car, customer or center does not exist.
    """
    data = validation.require_payload(data)
    fields = {
        "description": validation.require_text(data, "description", max_length=1000),
        "status": _status_or_default(data),
    }
    if data.get("created_at") is not None:
        fields["created_at"] = validation.require_datetime(data, "created_at")
    for name in REFERENCE_FIELDS:
        fields[name] = validation.require_id(data, name)
    return entity_cache.coordinator.create(SERVICE_REQUEST, fields)


def create_request(
    car_id: int, customer_id: int, service_center_id: int, description: str
):
    """Create a request with the default status from its four parts."""
    return create(
        {
            "car_id": car_id,
            "customer_id": customer_id,
            "service_center_id": service_center_id,
            "description": description,
        }
    )


def update(request_id: int, data: dict):
    """
    Replace a request's description and status; reference ids present
    in ``data`` are validated and applied, absent ones are kept.

    Raises:
        InvalidInputError: The description or status is missing.
        NotFoundError:     The request or a new reference does not exist.
    """
    data = validation.require_payload(data)
    fields = {
        "description": validation.require_text(data, "description", max_length=1000),
        "status": _clean_status(data),
    }
    for name in REFERENCE_FIELDS:
        if data.get(name) is not None:
            fields[name] = validation.require_id(data, name)
    return entity_cache.coordinator.update(SERVICE_REQUEST, request_id, fields)


def update_status(request_id: int, status: str):
    """
    Set a request's status, e.g. ``update_status(7, "DONE")``.

    Raises:
        InvalidInputError: The status is blank.
        NotFoundError:     No request has that id.
    """
    new_status = _clean_status({"status": status})
    record = entity_cache.coordinator.update(
        SERVICE_REQUEST, request_id, {"status": new_status}
    )
    logger.debug("Service request %d status is now %s", request_id, record.status)
    return record


def delete(request_id: int) -> None:
    """Delete one request; the car, customer and center are untouched."""
    entity_cache.coordinator.delete(SERVICE_REQUEST, request_id)
