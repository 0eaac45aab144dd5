"""
Service request store access.
"""

from repair_shop.extensions import db
from repair_shop.models.service_request import ServiceRequest
from repair_shop.repositories.base import SqlAlchemyRepository


class ServiceRequestRepository(SqlAlchemyRepository):
    """Service requests, grouped by car, customer or service center."""

    model = ServiceRequest

    def find_by_customer_id(self, customer_id: int) -> list[ServiceRequest]:
        return self.find_all_by("customer_id", customer_id)

    def find_by_car_id(self, car_id: int) -> list[ServiceRequest]:
        return self.find_all_by("car_id", car_id)

    def find_by_service_center_id(self, service_center_id: int) -> list[ServiceRequest]:
        return self.find_all_by("service_center_id", service_center_id)

    def find_by_customer_or_cars(self, customer_id: int, car_ids) -> list[ServiceRequest]:
        """
        Return requests placed by the customer or made for any of the
        given cars (which may have been placed by someone else).
        """
        condition = ServiceRequest.customer_id == customer_id
        ids = list(car_ids)
        if ids:
            condition = db.or_(condition, ServiceRequest.car_id.in_(ids))
        stmt = db.select(ServiceRequest).where(condition).order_by(ServiceRequest.id)
        return self._scalars(stmt)
