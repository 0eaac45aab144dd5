"""
Immutable entity snapshots held by the cache.

ORM instances belong to the session (and therefore the thread) that
loaded them and expire on commit, so they are never cached.  Every
value that enters an ``IndexedCache`` is one of these frozen
dataclasses, built from a row right after it was read or committed.
Readers can share a snapshot freely: it can never be observed
half-updated.
"""

from dataclasses import asdict, dataclass
from datetime import datetime


@dataclass(frozen=True)
class CustomerRecord:
    """Committed state of one customer."""

    id: int
    first_name: str
    last_name: str
    email: str
    phone: str

    @classmethod
    def from_model(cls, row) -> "CustomerRecord":
        return cls(
            id=row.id,
            first_name=row.first_name,
            last_name=row.last_name,
            email=row.email,
            phone=row.phone,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class CarRecord:
    """Committed state of one car; ``customer_id`` is the owner."""

    id: int
    brand: str
    model: str
    vin: str
    year: int
    customer_id: int

    @classmethod
    def from_model(cls, row) -> "CarRecord":
        return cls(
            id=row.id,
            brand=row.brand,
            model=row.model,
            vin=row.vin,
            year=row.year,
            customer_id=row.customer_id,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ServiceCenterRecord:
    """Committed state of one service center."""

    id: int
    name: str
    address: str
    phone: str

    @classmethod
    def from_model(cls, row) -> "ServiceCenterRecord":
        return cls(id=row.id, name=row.name, address=row.address, phone=row.phone)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ServiceRequestRecord:
    """Committed state of one service request."""

    id: int
    description: str
    status: str
    created_at: datetime
    car_id: int
    customer_id: int
    service_center_id: int

    @classmethod
    def from_model(cls, row) -> "ServiceRequestRecord":
        return cls(
            id=row.id,
            description=row.description,
            status=row.status,
            created_at=row.created_at,
            car_id=row.car_id,
            customer_id=row.customer_id,
            service_center_id=row.service_center_id,
        )

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat() if self.created_at else None
        return data
