"""
Service center store access.
"""

from repair_shop.models.service_center import ServiceCenter
from repair_shop.repositories.base import SqlAlchemyRepository


class ServiceCenterRepository(SqlAlchemyRepository):
    """Service centers, looked up by id, name, address or phone."""

    model = ServiceCenter

    def find_by_name(self, name: str) -> ServiceCenter | None:
        return self.find_one_by("name", name)

    def find_by_address(self, address: str) -> ServiceCenter | None:
        return self.find_one_by("address", address)

    def find_by_phone(self, phone: str) -> ServiceCenter | None:
        return self.find_one_by("phone", phone)
