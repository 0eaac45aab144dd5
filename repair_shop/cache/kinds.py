"""
Entity kinds handled by the cache layer and the associations between
them.

An ``EntityKind`` bundles everything the coordinator needs to treat the
four kinds with one code path: the mapped model, the snapshot type, the
repository, the natural keys (unique in the store and indexed in the
cache) and the foreign keys that must resolve before a write.
"""

from dataclasses import dataclass

from repair_shop.cache.records import (
    CarRecord,
    CustomerRecord,
    ServiceCenterRecord,
    ServiceRequestRecord,
)
from repair_shop.models import Car, Customer, ServiceCenter, ServiceRequest
from repair_shop.repositories import (
    CarRepository,
    CustomerRepository,
    ServiceCenterRepository,
    ServiceRequestRepository,
)

CUSTOMER = "customer"
CAR = "car"
SERVICE_CENTER = "service_center"
SERVICE_REQUEST = "service_request"

# -- Reverse views kept by the relationship graph --------------------------
CARS_BY_CUSTOMER = "cars_by_customer"
REQUESTS_BY_CUSTOMER = "requests_by_customer"
REQUESTS_BY_CAR = "requests_by_car"
REQUESTS_BY_SERVICE_CENTER = "requests_by_service_center"
CARS_BY_SERVICE_CENTER = "cars_by_service_center"
SERVICE_CENTERS_BY_CAR = "service_centers_by_car"


@dataclass(frozen=True)
class EntityKind:
    """Static description of one entity kind."""

    name: str
    label: str
    model: type
    record: type
    repository: object
    unique_fields: tuple[str, ...] = ()
    # (foreign-key field, referenced kind name)
    references: tuple[tuple[str, str], ...] = ()


@dataclass(frozen=True)
class Relation:
    """
    One reverse view: the children of a parent entity.

    ``foreign_key`` names the child column holding the parent id.  It is
    None for the two sides of the car <-> service-center association,
    which is stored in its own table.
    """

    name: str
    parent: str
    child: str
    foreign_key: str | None = None


RELATIONS: dict[str, Relation] = {
    relation.name: relation
    for relation in (
        Relation(CARS_BY_CUSTOMER, CUSTOMER, CAR, "customer_id"),
        Relation(REQUESTS_BY_CUSTOMER, CUSTOMER, SERVICE_REQUEST, "customer_id"),
        Relation(REQUESTS_BY_CAR, CAR, SERVICE_REQUEST, "car_id"),
        Relation(
            REQUESTS_BY_SERVICE_CENTER,
            SERVICE_CENTER,
            SERVICE_REQUEST,
            "service_center_id",
        ),
        Relation(CARS_BY_SERVICE_CENTER, SERVICE_CENTER, CAR),
        Relation(SERVICE_CENTERS_BY_CAR, CAR, SERVICE_CENTER),
    )
}


def build_kinds() -> dict[str, EntityKind]:
    """Return a fresh kind table with its own repository instances."""
    kinds = (
        EntityKind(
            name=CUSTOMER,
            label="Customer",
            model=Customer,
            record=CustomerRecord,
            repository=CustomerRepository(),
            unique_fields=("email", "phone"),
        ),
        EntityKind(
            name=CAR,
            label="Car",
            model=Car,
            record=CarRecord,
            repository=CarRepository(),
            unique_fields=("vin",),
            references=(("customer_id", CUSTOMER),),
        ),
        EntityKind(
            name=SERVICE_CENTER,
            label="Service center",
            model=ServiceCenter,
            record=ServiceCenterRecord,
            repository=ServiceCenterRepository(),
            unique_fields=("name", "address", "phone"),
        ),
        EntityKind(
            name=SERVICE_REQUEST,
            label="Service request",
            model=ServiceRequest,
            record=ServiceRequestRecord,
            repository=ServiceRequestRepository(),
            references=(
                ("car_id", CAR),
                ("customer_id", CUSTOMER),
                ("service_center_id", SERVICE_CENTER),
            ),
        ),
    )
    return {kind.name: kind for kind in kinds}
