"""
Routes for the service centers blueprint, mounted at
``/api/service-centers``.
"""

from flask import request

from repair_shop.blueprints import json_body, render
from repair_shop.blueprints.service_centers import bp
from repair_shop.services import service_center_service


@bp.route("", methods=["GET"])
def list_service_centers():
    """List all service centers, or look one up with ``?name=``."""
    name = request.args.get("name")
    if name:
        return render(service_center_service.get_by_name(name))
    return render(service_center_service.get_all())


@bp.route("/<int:service_center_id>", methods=["GET"])
def get_service_center(service_center_id):
    return render(service_center_service.get_by_id(service_center_id))


@bp.route("", methods=["POST"])
def create_service_center():
    return render(service_center_service.create(json_body()), 201)


@bp.route("/<int:service_center_id>", methods=["PUT"])
def update_service_center(service_center_id):
    return render(service_center_service.update(service_center_id, json_body()))


@bp.route("/<int:service_center_id>", methods=["DELETE"])
def delete_service_center(service_center_id):
    service_center_service.delete(service_center_id)
    return "", 204


@bp.route("/<int:service_center_id>/cars", methods=["GET"])
def service_center_cars(service_center_id):
    return render(service_center_service.get_cars_for_service_center(service_center_id))


@bp.route("/<int:service_center_id>/requests", methods=["GET"])
def service_center_requests(service_center_id):
    return render(
        service_center_service.get_requests_by_service_center_id(service_center_id)
    )
