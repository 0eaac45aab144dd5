"""
Routes for the cars blueprint, mounted at ``/api/cars``.

Ownership transfer and service-center registration are sub-resources
of a car::

    PUT    /api/cars/3/owner                 {"customer_id": 9}
    PUT    /api/cars/3/service-centers/2
    DELETE /api/cars/3/service-centers/2
"""

from flask import request

from repair_shop.blueprints import json_body, param, render
from repair_shop.blueprints.cars import bp
from repair_shop.services import car_service, service_request_service
from repair_shop.services.validation import require_id


@bp.route("", methods=["GET"])
def list_cars():
    """List all cars, or look one up with ``?vin=``."""
    vin = request.args.get("vin")
    if vin:
        return render(car_service.get_by_vin(vin))
    return render(car_service.get_all())


@bp.route("/<int:car_id>", methods=["GET"])
def get_car(car_id):
    return render(car_service.get_by_id(car_id))


@bp.route("", methods=["POST"])
def create_car():
    return render(car_service.create(json_body()), 201)


@bp.route("/bulk", methods=["POST"])
def create_cars_bulk():
    """
    Create a list of cars.  ``?yearFilter=2019`` keeps only the cars of
    that model year.
    """
    year_filter = request.args.get("yearFilter", type=int)
    return render(car_service.create_bulk(json_body(), year_filter=year_filter), 201)


@bp.route("/<int:car_id>", methods=["PUT"])
def update_car(car_id):
    return render(car_service.update(car_id, json_body()))


@bp.route("/<int:car_id>", methods=["DELETE"])
def delete_car(car_id):
    car_service.delete(car_id)
    return "", 204


@bp.route("/<int:car_id>/owner", methods=["PUT"])
def transfer_car(car_id):
    """Transfer the car to the customer named by ``customer_id``."""
    args = {"customer_id": param("customer_id", type=int)}
    new_customer_id = require_id(args, "customer_id")
    return render(car_service.transfer_ownership(car_id, new_customer_id))


@bp.route("/<int:car_id>/service-centers", methods=["GET"])
def car_service_centers(car_id):
    return render(car_service.get_service_centers_for_car(car_id))


@bp.route("/<int:car_id>/service-centers/<int:service_center_id>", methods=["PUT"])
def add_car_to_service_center(car_id, service_center_id):
    return render(car_service.add_to_service_center(car_id, service_center_id))


@bp.route("/<int:car_id>/service-centers/<int:service_center_id>", methods=["DELETE"])
def remove_car_from_service_center(car_id, service_center_id):
    return render(car_service.remove_from_service_center(car_id, service_center_id))


@bp.route("/<int:car_id>/requests", methods=["GET"])
def car_requests(car_id):
    return render(service_request_service.get_requests_by_car_id(car_id))
