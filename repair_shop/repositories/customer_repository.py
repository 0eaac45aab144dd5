"""
Customer store access.
"""

from repair_shop.models.customer import Customer
from repair_shop.repositories.base import SqlAlchemyRepository


class CustomerRepository(SqlAlchemyRepository):
    """Customers, looked up by id, email or phone."""

    model = Customer

    def find_by_email(self, email: str) -> Customer | None:
        return self.find_one_by("email", email)

    def find_by_phone(self, phone: str) -> Customer | None:
        return self.find_one_by("phone", phone)

    def exists_by_email(self, email: str, exclude_id: int | None = None) -> bool:
        return self.exists_by("email", email, exclude_id)

    def exists_by_phone(self, phone: str, exclude_id: int | None = None) -> bool:
        return self.exists_by("phone", phone, exclude_id)
