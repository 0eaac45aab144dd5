"""
Relationship graph — derived reverse views of the entity associations.

Associations are stored one way only: a car row holds its owner's id, a
service request holds its car, customer and service center ids, and the
``car_service_center`` table holds the service-center visits.  The
reverse direction ("cars of customer 7", "requests at center 3") is a
*view* kept here, keyed by (relation name, parent id).

A view is either absent (unknown, load it from the store) or complete.
Writers update known views after commit with ``link`` / ``unlink`` and
drop views whose parent is gone.  Every change stamps the view key, so
a concurrent read-through that started earlier cannot install an
outdated child set (see ``repair_shop.cache.versioning``).

The graph also turns the two multi-entity mutations into explicit
plans resolved against the store:

* **ownership transfer** — the car, its current owner and its new owner;
* **cascading delete** — every service request, car and association row
  that goes with the target, children listed before parents.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any

from repair_shop.cache.kinds import (
    CAR,
    CARS_BY_CUSTOMER,
    CARS_BY_SERVICE_CENTER,
    CUSTOMER,
    RELATIONS,
    SERVICE_CENTER,
    SERVICE_CENTERS_BY_CAR,
    SERVICE_REQUEST,
    EntityKind,
)
from repair_shop.cache.records import CarRecord, CustomerRecord
from repair_shop.cache.versioning import ReadToken, WriteClock
from repair_shop.exceptions import NotFoundError
from repair_shop.repositories import ServiceCenterLinkRepository

logger = logging.getLogger(__name__)


@dataclass
class OwnershipTransfer:
    """Resolved inputs of a car ownership transfer."""

    car: CarRecord
    old_owner: CustomerRecord
    new_owner: CustomerRecord
    car_row: Any = field(repr=False)

    @property
    def changes_owner(self) -> bool:
        return self.old_owner.id != self.new_owner.id


@dataclass
class CascadePlan:
    """
    Everything a delete removes, as committed snapshots plus the rows
    the coordinator hands to the repositories.

    Deletion and eviction both run in field order: requests, then
    association links, then cars, then the target itself.
    """

    kind: str
    target: Any
    requests: tuple = ()
    links: tuple[tuple[int, int], ...] = ()
    cars: tuple = ()
    target_row: Any = field(default=None, repr=False)
    request_rows: list = field(default_factory=list, repr=False)
    car_rows: list = field(default_factory=list, repr=False)


class RelationshipGraph:
    """
    Thread-safe store of reverse views plus the transfer / cascade
    planners.

    Args:
        kinds: Entity kind table from ``build_kinds()``.
        links: Repository for the car <-> service-center association.
    """

    def __init__(
        self, kinds: dict[str, EntityKind], links: ServiceCenterLinkRepository
    ) -> None:
        self._kinds = kinds
        self._links = links
        self._lock = threading.RLock()
        self._views: dict[tuple[str, int], frozenset[int]] = {}
        self._clock = WriteClock()

    # -- Views -------------------------------------------------------------

    def view(self, relation: str, parent_id: int) -> frozenset[int] | None:
        """Return the cached child ids of ``parent_id``, or None if unknown."""
        with self._lock:
            return self._views.get((relation, parent_id))

    def read_token(self) -> ReadToken:
        with self._lock:
            return self._clock.token()

    def populate(self, relation: str, parent_id: int, child_ids, token: ReadToken) -> bool:
        """Install a complete child set read from the store, unless stale."""
        key = (relation, parent_id)
        with self._lock:
            if not self._clock.is_current(key, token):
                logger.debug("Refused stale %s view for parent %r", relation, parent_id)
                return False
            self._views[key] = frozenset(child_ids)
            return True

    def link(self, relation: str, parent_id: int, child_id: int) -> None:
        """Add ``child_id`` to a known view; unknown views stay unknown."""
        key = (relation, parent_id)
        with self._lock:
            current = self._views.get(key)
            if current is not None:
                self._views[key] = current | {child_id}
            self._clock.stamp(key)

    def unlink(self, relation: str, parent_id: int, child_id: int) -> None:
        key = (relation, parent_id)
        with self._lock:
            current = self._views.get(key)
            if current is not None:
                self._views[key] = current - {child_id}
            self._clock.stamp(key)

    def drop(self, relation: str, parent_id: int) -> None:
        """Forget a view entirely (its parent was deleted)."""
        key = (relation, parent_id)
        with self._lock:
            self._views.pop(key, None)
            self._clock.stamp(key)

    def clear(self) -> None:
        with self._lock:
            self._views.clear()
            self._clock.reset()

    def stats(self) -> dict:
        with self._lock:
            per_relation: dict[str, int] = {name: 0 for name in RELATIONS}
            for relation, _parent in self._views:
                per_relation[relation] += 1
            return {
                "views": len(self._views),
                "by_relation": per_relation,
                "write_stamps": len(self._clock),
            }

    # -- Applying committed writes -----------------------------------------

    def record_write(self, kind: str, record: Any, previous: Any = None) -> None:
        """
        Move ``record`` between parent views after a create or update.

        For each foreign key of ``kind`` that changed (or every one, on
        create) the record leaves its old parent's view and joins the
        new one.
        """
        for relation in RELATIONS.values():
            if relation.child != kind or relation.foreign_key is None:
                continue
            new_parent = getattr(record, relation.foreign_key)
            old_parent = (
                getattr(previous, relation.foreign_key) if previous is not None else None
            )
            if old_parent == new_parent:
                continue
            if old_parent is not None:
                self.unlink(relation.name, old_parent, record.id)
            self.link(relation.name, new_parent, record.id)

    def record_removed(self, kind: str, record: Any) -> None:
        """Take a deleted entity out of its parents' views and drop its own views."""
        for relation in RELATIONS.values():
            if relation.child == kind and relation.foreign_key is not None:
                self.unlink(relation.name, getattr(record, relation.foreign_key), record.id)
            if relation.parent == kind:
                self.drop(relation.name, record.id)

    def record_link(self, car_id: int, service_center_id: int) -> None:
        self.link(CARS_BY_SERVICE_CENTER, service_center_id, car_id)
        self.link(SERVICE_CENTERS_BY_CAR, car_id, service_center_id)

    def record_unlink(self, car_id: int, service_center_id: int) -> None:
        self.unlink(CARS_BY_SERVICE_CENTER, service_center_id, car_id)
        self.unlink(SERVICE_CENTERS_BY_CAR, car_id, service_center_id)

    # -- Ownership transfer ------------------------------------------------

    def plan_transfer(self, car_id: int, new_customer_id: int) -> OwnershipTransfer:
        """
        Load the car, its current owner and the new owner from the store.

        Raises:
            NotFoundError: If the car or the new owner does not exist.
        """
        car_row = self._load(CAR, car_id)
        old_owner_row = self._load(CUSTOMER, car_row.customer_id)
        new_owner_row = self._load(CUSTOMER, new_customer_id)
        return OwnershipTransfer(
            car=CarRecord.from_model(car_row),
            old_owner=CustomerRecord.from_model(old_owner_row),
            new_owner=CustomerRecord.from_model(new_owner_row),
            car_row=car_row,
        )

    def apply_transfer(self, transfer: OwnershipTransfer) -> None:
        """Move the car from the old owner's view to the new owner's."""
        if not transfer.changes_owner:
            return
        self.unlink(CARS_BY_CUSTOMER, transfer.old_owner.id, transfer.car.id)
        self.link(CARS_BY_CUSTOMER, transfer.new_owner.id, transfer.car.id)
        logger.debug(
            "Moved car %d from customer %d to customer %d in views",
            transfer.car.id,
            transfer.old_owner.id,
            transfer.new_owner.id,
        )

    # -- Cascading delete --------------------------------------------------

    def plan_cascade(self, kind: str, entity_id: int) -> CascadePlan:
        """
        Resolve everything deleting ``kind`` / ``entity_id`` removes.

        The set is read from the store, never from the cache, because the
        cache may not hold every dependent row.

        * customer: its cars, every request placed by the customer or made
          for one of its cars, and the cars' service-center links;
        * car: its requests and service-center links;
        * service center: its requests and car links;
        * service request: nothing but itself.

        Cascades never travel sideways: the customers, cars and service
        centers that a deleted request referenced are left untouched.

        Raises:
            NotFoundError: If the target does not exist.
        """
        target_row = self._load(kind, entity_id)
        requests_repo = self._kinds[SERVICE_REQUEST].repository
        car_rows: list = []
        links: list[tuple[int, int]] = []

        if kind == CUSTOMER:
            car_rows = self._kinds[CAR].repository.find_by_customer_id(entity_id)
            car_ids = [row.id for row in car_rows]
            request_rows = requests_repo.find_by_customer_or_cars(entity_id, car_ids)
            links = self._links.links_for_cars(car_ids)
        elif kind == CAR:
            request_rows = requests_repo.find_by_car_id(entity_id)
            links = self._links.links_for_cars([entity_id])
        elif kind == SERVICE_CENTER:
            request_rows = requests_repo.find_by_service_center_id(entity_id)
            links = self._links.links_for_service_center(entity_id)
        else:
            request_rows = []

        record_type = self._kinds[kind].record
        request_record = self._kinds[SERVICE_REQUEST].record
        return CascadePlan(
            kind=kind,
            target=record_type.from_model(target_row),
            requests=tuple(request_record.from_model(row) for row in request_rows),
            links=tuple(links),
            cars=tuple(CarRecord.from_model(row) for row in car_rows),
            target_row=target_row,
            request_rows=list(request_rows),
            car_rows=list(car_rows),
        )

    def apply_cascade(self, plan: CascadePlan) -> None:
        """Update views after a committed cascade, children before parents."""
        for request in plan.requests:
            self.record_removed(SERVICE_REQUEST, request)
        for car_id, service_center_id in plan.links:
            self.record_unlink(car_id, service_center_id)
        for car in plan.cars:
            self.record_removed(CAR, car)
        self.record_removed(plan.kind, plan.target)

    # -- Internal helpers --------------------------------------------------

    def _load(self, kind: str, entity_id: int):
        entity_kind = self._kinds[kind]
        row = entity_kind.repository.find_by_id(entity_id, refresh=True)
        if row is None:
            raise NotFoundError(f"{entity_kind.label} not found with id {entity_id}")
        return row
