"""
Consistency coordinator — the single choke point between the services,
the store and the caches.

Every mutating operation runs the same sequence:

1. validate: referenced ids must exist and natural keys must be free,
   both checked against the store (the cache may be incomplete);
2. write the store inside one transaction and commit;
3. update the entity caches and the relationship graph.

Step 3 only runs after a successful commit, so the caches never hold a
value that was not committed, and a failed operation (NotFound,
Conflict, a rolled-back transaction) leaves them exactly as they were.

Writes are serialized by one lock.  Two writers therefore apply their
cache updates in the same order as their commits, and the last value
cached for an id is always the last value committed for it.  Reads do
not take the write lock; a read-through that races a writer is fenced
off by the caches' read tokens instead.
"""

import logging
import threading
from typing import Any

from repair_shop.cache.indexed_cache import PRIMARY_INDEX, IndexedCache
from repair_shop.cache.kinds import (
    CAR,
    RELATIONS,
    SERVICE_CENTER,
    SERVICE_REQUEST,
    EntityKind,
)
from repair_shop.cache.relationship_graph import RelationshipGraph
from repair_shop.exceptions import ConflictError, InvalidInputError, NotFoundError
from repair_shop.repositories import ServiceCenterLinkRepository, transaction

logger = logging.getLogger(__name__)


class ConsistencyCoordinator:
    """
    Read-through / write-then-cache orchestration for all entity kinds.

    Args:
        kinds:  Entity kind table from ``build_kinds()``.
        caches: One ``IndexedCache`` per kind name.
        graph:  The relationship graph sharing this coordinator's store.
        links:  Repository for the car <-> service-center association.
    """

    def __init__(
        self,
        kinds: dict[str, EntityKind],
        caches: dict[str, IndexedCache],
        graph: RelationshipGraph,
        links: ServiceCenterLinkRepository,
    ) -> None:
        self.kinds = kinds
        self.caches = caches
        self.graph = graph
        self._links = links
        self._write_lock = threading.RLock()

    # =====================================================================
    # Reads
    # =====================================================================

    def find_all(self, kind_name: str) -> list:
        """Return every entity of a kind from the store, warming the cache."""
        kind = self.kinds[kind_name]
        cache = self.caches[kind_name]
        token = cache.read_token()
        records = [kind.record.from_model(row) for row in kind.repository.find_all()]
        for record in records:
            cache.populate(record, token)
        return records

    def find_by_id(self, kind_name: str, entity_id: int) -> Any:
        """
        Return one entity, from the cache when possible.

        Raises:
            NotFoundError: If the id does not exist in the store.
        """
        return self.find_by_key(kind_name, PRIMARY_INDEX, entity_id)

    def find_by_key(self, kind_name: str, index_name: str, key: Any) -> Any:
        """
        Read-through lookup by the primary id or a natural key.

        Raises:
            NotFoundError: If no entity has that key in the store.
        """
        kind = self.kinds[kind_name]
        cache = self.caches[kind_name]
        record = cache.get(index_name, key)
        if record is not None:
            return record

        token = cache.read_token()
        if index_name == PRIMARY_INDEX:
            row = kind.repository.find_by_id(key, refresh=True)
        else:
            row = kind.repository.find_one_by(index_name, key)
        if row is None:
            raise NotFoundError(f"{kind.label} not found with {index_name} {key}")

        record = kind.record.from_model(row)
        cache.populate(record, token)
        return record

    def children(self, relation_name: str, parent_id: int) -> list:
        """
        Return the children of ``parent_id`` along one relation, e.g. the
        cars of a customer or the requests at a service center.

        The child-id set comes from the relationship graph; on a miss it
        is loaded from the store and installed.

        Raises:
            NotFoundError: If the parent does not exist.
        """
        relation = RELATIONS[relation_name]
        self.find_by_id(relation.parent, parent_id)

        child_ids = self.graph.view(relation_name, parent_id)
        if child_ids is not None:
            return self._records_for(relation.child, child_ids)

        child_kind = self.kinds[relation.child]
        child_cache = self.caches[relation.child]
        view_token = self.graph.read_token()
        child_token = child_cache.read_token()
        rows = self._load_children(relation, parent_id)
        records = [child_kind.record.from_model(row) for row in rows]

        self.graph.populate(relation_name, parent_id, [r.id for r in records], view_token)
        for record in records:
            child_cache.populate(record, child_token)
        return records

    # =====================================================================
    # Writes
    # =====================================================================

    def create(self, kind_name: str, fields: dict) -> Any:
        """
        Validate, insert, commit, then cache the new entity.

        Raises:
            NotFoundError:  A referenced id does not exist.
            ConflictError:  A natural key is already taken.
        """
        kind = self.kinds[kind_name]
        with self._write_lock:
            self._check_references(kind, fields)
            self._check_unique(kind, fields)
            with transaction():
                row = kind.repository.save(kind.model(**fields))
            record = kind.record.from_model(row)
            self.caches[kind_name].put(record)
            self.graph.record_write(kind_name, record)

        logger.info("Created %s id=%d", kind.label.lower(), record.id)
        return record

    def update(self, kind_name: str, entity_id: int, fields: dict) -> Any:
        """
        Apply ``fields`` to an existing entity.

        Only fields whose value actually changes are checked and written.
        Natural keys that changed are evicted from the cache as part of
        the same ``put`` that caches the new value.

        Raises:
            NotFoundError:  The entity or a newly referenced id does not exist.
            ConflictError:  A changed natural key is already taken.
        """
        kind = self.kinds[kind_name]
        with self._write_lock:
            row = self._require(kind, entity_id)
            previous = kind.record.from_model(row)
            changes = {
                name: value
                for name, value in fields.items()
                if getattr(previous, name) != value
            }
            self._check_references(kind, changes)
            self._check_unique(kind, changes, exclude_id=entity_id)

            if changes:
                with transaction():
                    for name, value in changes.items():
                        setattr(row, name, value)
                    kind.repository.save(row)

            record = kind.record.from_model(row)
            self.caches[kind_name].put(record)
            self.graph.record_write(kind_name, record, previous)

        if changes:
            logger.info(
                "Updated %s id=%d (%s)",
                kind.label.lower(),
                entity_id,
                ", ".join(sorted(changes)),
            )
        return record

    def delete(self, kind_name: str, entity_id: int) -> Any:
        """
        Delete an entity and everything that cascades from it.

        The cascade set is resolved by the relationship graph, deleted
        child-before-parent inside one transaction, then evicted from the
        caches in the same order.

        Returns:
            The cascade plan that was executed (for logging and tests).

        Raises:
            NotFoundError: If the entity does not exist.
        """
        kind = self.kinds[kind_name]
        with self._write_lock:
            plan = self.graph.plan_cascade(kind_name, entity_id)
            with transaction():
                self.kinds[SERVICE_REQUEST].repository.delete_all(plan.request_rows)
                self._links.delete_links(plan.links)
                self.kinds[CAR].repository.delete_all(plan.car_rows)
                kind.repository.delete(plan.target_row)

            for request in plan.requests:
                self.caches[SERVICE_REQUEST].evict_entity(request)
            for car in plan.cars:
                self.caches[CAR].evict_entity(car)
            self.caches[kind_name].evict_entity(plan.target)
            self.graph.apply_cascade(plan)

        logger.info(
            "Deleted %s id=%d (cascade: %d request(s), %d car(s), %d link(s))",
            kind.label.lower(),
            entity_id,
            len(plan.requests),
            len(plan.cars),
            len(plan.links),
        )
        return plan

    def transfer_ownership(self, car_id: int, new_customer_id: int) -> Any:
        """
        Move a car to a new owner in one transaction.

        Raises:
            NotFoundError: If the car or the new owner does not exist.
        """
        with self._write_lock:
            transfer = self.graph.plan_transfer(car_id, new_customer_id)
            if transfer.changes_owner:
                with transaction():
                    transfer.car_row.customer_id = new_customer_id
                    self.kinds[CAR].repository.save(transfer.car_row)
            record = self.kinds[CAR].record.from_model(transfer.car_row)
            self.caches[CAR].put(record)
            self.graph.apply_transfer(transfer)

        if transfer.changes_owner:
            logger.info(
                "Transferred car id=%d from customer %d to customer %d",
                car_id,
                transfer.old_owner.id,
                new_customer_id,
            )
        return record

    def link_service_center(self, car_id: int, service_center_id: int) -> Any:
        """
        Record that a car is serviced at a service center.  Linking an
        already linked pair is a no-op.

        Raises:
            NotFoundError: If the car or the service center does not exist.
        """
        with self._write_lock:
            car_row = self._require(self.kinds[CAR], car_id)
            self._require(self.kinds[SERVICE_CENTER], service_center_id)
            if not self._links.exists(car_id, service_center_id):
                with transaction():
                    self._links.add(car_id, service_center_id)
                logger.info(
                    "Linked car id=%d to service center id=%d", car_id, service_center_id
                )
            self.graph.record_link(car_id, service_center_id)
            return self.kinds[CAR].record.from_model(car_row)

    def unlink_service_center(self, car_id: int, service_center_id: int) -> Any:
        """
        Remove a car from a service center.  Neither entity is deleted.

        Raises:
            NotFoundError: If either entity does not exist or they are not linked.
        """
        with self._write_lock:
            car_row = self._require(self.kinds[CAR], car_id)
            self._require(self.kinds[SERVICE_CENTER], service_center_id)
            if not self._links.exists(car_id, service_center_id):
                raise NotFoundError(
                    f"Car {car_id} is not registered at service center "
                    f"{service_center_id}"
                )
            with transaction():
                self._links.remove(car_id, service_center_id)
            self.graph.record_unlink(car_id, service_center_id)
            logger.info(
                "Unlinked car id=%d from service center id=%d", car_id, service_center_id
            )
            return self.kinds[CAR].record.from_model(car_row)

    # =====================================================================
    # Maintenance
    # =====================================================================

    def reset(self) -> None:
        """Drop every cache entry and view.  Always safe; reads reload."""
        with self._write_lock:
            for cache in self.caches.values():
                cache.clear()
            self.graph.clear()

    def stats(self) -> dict:
        return {
            "caches": {name: cache.stats() for name, cache in self.caches.items()},
            "graph": self.graph.stats(),
        }

    # =====================================================================
    # Internal helpers
    # =====================================================================

    def _require(self, kind: EntityKind, entity_id: int):
        """Load a row fresh from the store or raise NotFoundError."""
        row = kind.repository.find_by_id(entity_id, refresh=True)
        if row is None:
            raise NotFoundError(f"{kind.label} not found with id {entity_id}")
        return row

    def _check_references(self, kind: EntityKind, fields: dict) -> None:
        for field_name, referenced in kind.references:
            if field_name not in fields:
                continue
            value = fields[field_name]
            if value is None:
                raise InvalidInputError(f"{field_name} is required", field=field_name)
            ref_kind = self.kinds[referenced]
            if ref_kind.repository.find_by_id(value, refresh=True) is None:
                raise NotFoundError(
                    f"{ref_kind.label} not found with id {value}", field=field_name
                )

    def _check_unique(
        self, kind: EntityKind, fields: dict, exclude_id: int | None = None
    ) -> None:
        for field_name in kind.unique_fields:
            if field_name not in fields:
                continue
            if kind.repository.exists_by(field_name, fields[field_name], exclude_id):
                raise ConflictError(
                    f"{kind.label} with this {field_name} already exists",
                    field=field_name,
                )

    def _load_children(self, relation, parent_id: int) -> list:
        child_repo = self.kinds[relation.child].repository
        if relation.foreign_key is not None:
            return child_repo.find_all_by(relation.foreign_key, parent_id)
        if relation.child == CAR:
            ids = self._links.car_ids_for_service_center(parent_id)
        else:
            ids = self._links.service_center_ids_for_car(parent_id)
        return child_repo.find_by_ids(ids)

    def _records_for(self, kind_name: str, entity_ids) -> list:
        """
        Resolve child ids to snapshots, cache first, in id order.  Ids
        deleted since the view was read are skipped.
        """
        kind = self.kinds[kind_name]
        cache = self.caches[kind_name]
        found: dict[int, Any] = {}
        missing: list[int] = []
        for entity_id in sorted(entity_ids):
            record = cache.get(PRIMARY_INDEX, entity_id)
            if record is None:
                missing.append(entity_id)
            else:
                found[entity_id] = record

        if missing:
            token = cache.read_token()
            for row in kind.repository.find_by_ids(missing):
                record = kind.record.from_model(row)
                cache.populate(record, token)
                found[record.id] = record

        return [found[entity_id] for entity_id in sorted(found)]
