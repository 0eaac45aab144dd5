"""
Routes for the customers blueprint, mounted at ``/api/customers``.
"""

from flask import request

from repair_shop.blueprints import json_body, render
from repair_shop.blueprints.customers import bp
from repair_shop.services import customer_service


@bp.route("", methods=["GET"])
def list_customers():
    """List all customers, or look one up with ``?email=``."""
    email = request.args.get("email")
    if email:
        return render(customer_service.get_by_email(email))
    return render(customer_service.get_all())


@bp.route("/<int:customer_id>", methods=["GET"])
def get_customer(customer_id):
    return render(customer_service.get_by_id(customer_id))


@bp.route("", methods=["POST"])
def create_customer():
    return render(customer_service.create(json_body()), 201)


@bp.route("/<int:customer_id>", methods=["PUT"])
def update_customer(customer_id):
    return render(customer_service.update(customer_id, json_body()))


@bp.route("/<int:customer_id>", methods=["DELETE"])
def delete_customer(customer_id):
    """Delete a customer with its cars and service requests."""
    customer_service.delete(customer_id)
    return "", 204


@bp.route("/<int:customer_id>/cars", methods=["GET"])
def customer_cars(customer_id):
    return render(customer_service.get_cars_by_customer_id(customer_id))


@bp.route("/<int:customer_id>/requests", methods=["GET"])
def customer_requests(customer_id):
    return render(customer_service.get_requests_by_customer_id(customer_id))
