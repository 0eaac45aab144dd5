"""
Car store access, including the car <-> service-center association.
"""

from repair_shop.extensions import db
from repair_shop.models.car import Car, car_service_center
from repair_shop.repositories.base import SqlAlchemyRepository


class CarRepository(SqlAlchemyRepository):
    """Cars, looked up by id, VIN or owner."""

    model = Car

    def find_by_vin(self, vin: str) -> Car | None:
        return self.find_one_by("vin", vin)

    def exists_by_vin(self, vin: str, exclude_id: int | None = None) -> bool:
        return self.exists_by("vin", vin, exclude_id)

    def find_by_customer_id(self, customer_id: int) -> list[Car]:
        return self.find_all_by("customer_id", customer_id)


class ServiceCenterLinkRepository:
    """
    Rows of the ``car_service_center`` association table.

    The table has no mapped class, so these methods issue Core
    statements through the session to stay inside its transaction.
    """

    table = car_service_center

    def exists(self, car_id: int, service_center_id: int) -> bool:
        stmt = db.select(self.table.c.car_id).where(
            self.table.c.car_id == car_id,
            self.table.c.service_center_id == service_center_id,
        )
        return db.session.execute(stmt.limit(1)).first() is not None

    def add(self, car_id: int, service_center_id: int) -> None:
        db.session.execute(
            db.insert(self.table).values(
                car_id=car_id, service_center_id=service_center_id
            )
        )

    def remove(self, car_id: int, service_center_id: int) -> int:
        result = db.session.execute(
            db.delete(self.table).where(
                self.table.c.car_id == car_id,
                self.table.c.service_center_id == service_center_id,
            )
        )
        return result.rowcount

    def service_center_ids_for_car(self, car_id: int) -> list[int]:
        stmt = (
            db.select(self.table.c.service_center_id)
            .where(self.table.c.car_id == car_id)
            .order_by(self.table.c.service_center_id)
        )
        return list(db.session.execute(stmt).scalars())

    def car_ids_for_service_center(self, service_center_id: int) -> list[int]:
        stmt = (
            db.select(self.table.c.car_id)
            .where(self.table.c.service_center_id == service_center_id)
            .order_by(self.table.c.car_id)
        )
        return list(db.session.execute(stmt).scalars())

    def links_for_cars(self, car_ids) -> list[tuple[int, int]]:
        """Return (car_id, service_center_id) pairs for the given cars."""
        ids = list(car_ids)
        if not ids:
            return []
        stmt = db.select(self.table.c.car_id, self.table.c.service_center_id).where(
            self.table.c.car_id.in_(ids)
        )
        return [tuple(row) for row in db.session.execute(stmt)]

    def links_for_service_center(self, service_center_id: int) -> list[tuple[int, int]]:
        return [
            (car_id, service_center_id)
            for car_id in self.car_ids_for_service_center(service_center_id)
        ]

    def delete_links(self, links) -> int:
        count = 0
        for car_id, service_center_id in links:
            count += self.remove(car_id, service_center_id)
        return count
