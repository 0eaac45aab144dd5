"""
Routes for the service requests blueprint, mounted at ``/api/requests``.

``/create`` and ``/<id>/status`` accept their arguments either in the
query string or in a JSON body::

    POST /api/requests/create?carId=1&customerId=1&serviceCenterId=2&description=brakes
    PUT  /api/requests/7/status?status=DONE
"""

from repair_shop.blueprints import json_body, param, render
from repair_shop.blueprints.service_requests import bp
from repair_shop.services import (
    customer_service,
    service_center_service,
    service_request_service,
)


@bp.route("", methods=["GET"])
def list_requests():
    return render(service_request_service.get_all())


@bp.route("/<int:request_id>", methods=["GET"])
def get_request(request_id):
    return render(service_request_service.get_by_id(request_id))


@bp.route("", methods=["POST"])
def create_request():
    return render(service_request_service.create(json_body()), 201)


@bp.route("/create", methods=["POST"])
def create_complete_request():
    """Create a request from its car, customer, service center and description."""
    record = service_request_service.create_request(
        car_id=param("carId", type=int),
        customer_id=param("customerId", type=int),
        service_center_id=param("serviceCenterId", type=int),
        description=param("description"),
    )
    return render(record, 201)


@bp.route("/<int:request_id>", methods=["PUT"])
def update_request(request_id):
    return render(service_request_service.update(request_id, json_body()))


@bp.route("/<int:request_id>/status", methods=["PUT"])
def update_request_status(request_id):
    return render(service_request_service.update_status(request_id, param("status")))


@bp.route("/<int:request_id>", methods=["DELETE"])
def delete_request(request_id):
    service_request_service.delete(request_id)
    return "", 204


@bp.route("/customer/<int:customer_id>", methods=["GET"])
def requests_by_customer(customer_id):
    return render(customer_service.get_requests_by_customer_id(customer_id))


@bp.route("/car/<int:car_id>", methods=["GET"])
def requests_by_car(car_id):
    return render(service_request_service.get_requests_by_car_id(car_id))


@bp.route("/service-center/<int:service_center_id>", methods=["GET"])
def requests_by_service_center(service_center_id):
    return render(
        service_center_service.get_requests_by_service_center_id(service_center_id)
    )
