"""
Tests for the consistency coordinator: read-through, write-then-cache
ordering, natural-key eviction, ownership transfer and cascades.

Store calls are counted by wrapping the repository instances the
coordinator was built with.
"""

from unittest import mock

import pytest

from repair_shop.cache.kinds import CAR, CUSTOMER, SERVICE_CENTER, SERVICE_REQUEST
from repair_shop.exceptions import ConflictError, InvalidInputError, NotFoundError
from repair_shop.extensions import db, entity_cache
from repair_shop.models import Car, Customer, ServiceCenter, ServiceRequest


def repository(kind: str):
    return entity_cache.registry.kinds[kind].repository


class TestReadThrough:
    """``find_by_id`` and ``find_by_key``."""

    def test_create_then_find_is_served_from_cache(self, coordinator, customer_data):
        created = coordinator.create(CUSTOMER, customer_data(1))
        repo = repository(CUSTOMER)

        with mock.patch.object(repo, "find_by_id", wraps=repo.find_by_id) as spy:
            first = coordinator.find_by_id(CUSTOMER, created.id)
            second = coordinator.find_by_id(CUSTOMER, created.id)

        assert first == created
        assert second is first
        assert spy.call_count == 0

    def test_second_find_after_miss_does_not_hit_store(self, coordinator, customer_data):
        created = coordinator.create(CUSTOMER, customer_data(1))
        coordinator.reset()
        repo = repository(CUSTOMER)

        with mock.patch.object(repo, "find_by_id", wraps=repo.find_by_id) as spy:
            first = coordinator.find_by_id(CUSTOMER, created.id)
            second = coordinator.find_by_id(CUSTOMER, created.id)

        assert first == created
        assert second == created
        assert spy.call_count == 1

    def test_cached_value_equals_stored_row(self, app, coordinator, customer_data):
        created = coordinator.create(CUSTOMER, customer_data(1))
        row = db.session.get(Customer, created.id, populate_existing=True)
        cached = coordinator.find_by_id(CUSTOMER, created.id)
        assert (cached.first_name, cached.email, cached.phone) == (
            row.first_name,
            row.email,
            row.phone,
        )

    def test_missing_id_raises_not_found(self, coordinator):
        with pytest.raises(NotFoundError, match="Car not found"):
            coordinator.find_by_id(CAR, 42)

    def test_find_by_natural_key_reads_through(self, coordinator, caches, customer_data):
        created = coordinator.create(CUSTOMER, customer_data(1))
        coordinator.reset()

        found = coordinator.find_by_key(CUSTOMER, "email", "customer1@example.com")
        assert found == created
        assert caches[CUSTOMER].get("id", created.id) == created

    def test_find_all_warms_cache(self, coordinator, caches, customer_data):
        for n in (1, 2, 3):
            coordinator.create(CUSTOMER, customer_data(n))
        coordinator.reset()

        records = coordinator.find_all(CUSTOMER)
        assert [r.email for r in records] == [
            "customer1@example.com",
            "customer2@example.com",
            "customer3@example.com",
        ]
        assert len(caches[CUSTOMER]) == 3


class TestWrites:
    """Validation against the store and cache updates after commit."""

    def test_update_changing_natural_key_evicts_old_key(
        self, coordinator, caches, customer_data
    ):
        created = coordinator.create(CUSTOMER, customer_data(1))
        coordinator.find_by_key(CUSTOMER, "email", "customer1@example.com")

        coordinator.update(CUSTOMER, created.id, {"email": "renamed@example.com"})

        assert caches[CUSTOMER].get("email", "customer1@example.com") is None
        with pytest.raises(NotFoundError):
            coordinator.find_by_key(CUSTOMER, "email", "customer1@example.com")
        assert coordinator.find_by_key(CUSTOMER, "email", "renamed@example.com").id == (
            created.id
        )

    @pytest.mark.parametrize(
        "kind, field, first, second",
        [
            (CAR, "vin", "VIN00001", "VIN99999"),
            (SERVICE_CENTER, "name", "Fix 1", "Fix Renamed"),
            (SERVICE_CENTER, "address", "1 Main St", "9 Side St"),
            (SERVICE_CENTER, "phone", "555-0201", "555-0299"),
        ],
    )
    def test_every_natural_key_is_evicted_on_change(
        self,
        coordinator,
        caches,
        customer_data,
        car_data,
        center_data,
        kind,
        field,
        first,
        second,
    ):
        owner = coordinator.create(CUSTOMER, customer_data(1))
        entity = (
            coordinator.create(CAR, car_data(owner.id, 1))
            if kind == CAR
            else coordinator.create(SERVICE_CENTER, center_data(1))
        )
        assert caches[kind].get(field, first) == entity

        coordinator.update(kind, entity.id, {field: second})

        assert caches[kind].get(field, first) is None
        assert caches[kind].get(field, second).id == entity.id

    def test_duplicate_email_conflicts_and_keeps_first_entry(
        self, coordinator, caches, customer_data
    ):
        first = coordinator.create(CUSTOMER, customer_data(1, email="a@x.com"))

        with pytest.raises(ConflictError) as excinfo:
            coordinator.create(CUSTOMER, customer_data(2, email="a@x.com"))

        assert excinfo.value.field == "email"
        assert caches[CUSTOMER].get("email", "a@x.com") is first
        assert coordinator.find_by_id(CUSTOMER, first.id) is first
        assert db.session.query(Customer).count() == 1

    def test_update_to_taken_key_conflicts_without_cache_change(
        self, coordinator, caches, customer_data
    ):
        first = coordinator.create(CUSTOMER, customer_data(1))
        second = coordinator.create(CUSTOMER, customer_data(2))

        with pytest.raises(ConflictError):
            coordinator.update(CUSTOMER, second.id, {"phone": first.phone})

        assert caches[CUSTOMER].get("id", second.id) is second
        assert caches[CUSTOMER].get("phone", first.phone) is first

    def test_update_keeping_own_key_is_not_a_conflict(self, coordinator, customer_data):
        created = coordinator.create(CUSTOMER, customer_data(1))
        updated = coordinator.update(
            CUSTOMER, created.id, {"email": created.email, "first_name": "Renamed"}
        )
        assert updated.first_name == "Renamed"

    def test_car_for_missing_customer_is_not_found(self, coordinator, caches, car_data):
        with pytest.raises(NotFoundError) as excinfo:
            coordinator.create(CAR, car_data(9999))
        assert excinfo.value.field == "customer_id"
        assert len(caches[CAR]) == 0
        assert db.session.query(Car).count() == 0

    def test_missing_reference_value_is_invalid(self, coordinator, car_data):
        with pytest.raises(InvalidInputError):
            coordinator.create(CAR, car_data(None))

    def test_update_missing_entity_is_not_found(self, coordinator):
        with pytest.raises(NotFoundError):
            coordinator.update(CUSTOMER, 77, {"first_name": "Ghost"})

    def test_store_conflict_at_commit_surfaces_as_conflict(
        self, coordinator, caches, customer_data
    ):
        """A writer that slips past the up-front check is caught at commit."""
        coordinator.create(CUSTOMER, customer_data(1))
        repo = repository(CUSTOMER)

        with mock.patch.object(repo, "exists_by", return_value=False):
            with pytest.raises(ConflictError, match="conflicts with data committed"):
                coordinator.create(CUSTOMER, customer_data(2, email="customer1@example.com"))

        assert len(caches[CUSTOMER]) == 1
        assert db.session.query(Customer).count() == 1


class TestOwnershipTransfer:
    def test_transfer_moves_car_between_customer_views(
        self, coordinator, customer_data, car_data
    ):
        old_owner = coordinator.create(CUSTOMER, customer_data(1))
        new_owner = coordinator.create(CUSTOMER, customer_data(2))
        car = coordinator.create(CAR, car_data(old_owner.id))
        assert [c.id for c in coordinator.children("cars_by_customer", old_owner.id)] == [
            car.id
        ]
        assert coordinator.children("cars_by_customer", new_owner.id) == []

        moved = coordinator.transfer_ownership(car.id, new_owner.id)

        assert moved.customer_id == new_owner.id
        assert coordinator.children("cars_by_customer", old_owner.id) == []
        assert [c.id for c in coordinator.children("cars_by_customer", new_owner.id)] == [
            car.id
        ]
        assert coordinator.find_by_id(CAR, car.id).customer_id == new_owner.id
        row = db.session.get(Car, car.id, populate_existing=True)
        assert row.customer_id == new_owner.id

    def test_transfer_views_are_served_without_store_reads(
        self, coordinator, customer_data, car_data
    ):
        old_owner = coordinator.create(CUSTOMER, customer_data(1))
        new_owner = coordinator.create(CUSTOMER, customer_data(2))
        car = coordinator.create(CAR, car_data(old_owner.id))
        coordinator.children("cars_by_customer", old_owner.id)
        coordinator.children("cars_by_customer", new_owner.id)
        coordinator.transfer_ownership(car.id, new_owner.id)

        repo = repository(CAR)
        with mock.patch.object(repo, "find_all_by", wraps=repo.find_all_by) as spy:
            coordinator.children("cars_by_customer", old_owner.id)
            coordinator.children("cars_by_customer", new_owner.id)
        assert spy.call_count == 0

    def test_transfer_to_missing_customer_changes_nothing(
        self, coordinator, customer_data, car_data
    ):
        owner = coordinator.create(CUSTOMER, customer_data(1))
        car = coordinator.create(CAR, car_data(owner.id))

        with pytest.raises(NotFoundError):
            coordinator.transfer_ownership(car.id, 9999)

        assert coordinator.find_by_id(CAR, car.id).customer_id == owner.id

    def test_transfer_to_current_owner_is_a_noop(self, coordinator, customer_data, car_data):
        owner = coordinator.create(CUSTOMER, customer_data(1))
        car = coordinator.create(CAR, car_data(owner.id))
        assert coordinator.transfer_ownership(car.id, owner.id) == car


class TestCascadingDelete:
    @pytest.fixture(autouse=True)
    def _setup(self, coordinator, customer_data, car_data, center_data):
        """A customer with N=2 cars and M=3 requests, plus a bystander."""
        self.coordinator = coordinator
        self.customer = coordinator.create(CUSTOMER, customer_data(1))
        self.bystander = coordinator.create(CUSTOMER, customer_data(2))
        self.center = coordinator.create(SERVICE_CENTER, center_data(1))
        self.cars = [
            coordinator.create(CAR, car_data(self.customer.id, n)) for n in (1, 2)
        ]
        self.other_car = coordinator.create(CAR, car_data(self.bystander.id, 3))
        coordinator.link_service_center(self.cars[0].id, self.center.id)

        def request(car, customer, description):
            return coordinator.create(
                SERVICE_REQUEST,
                {
                    "description": description,
                    "status": "PENDING",
                    "car_id": car.id,
                    "customer_id": customer.id,
                    "service_center_id": self.center.id,
                },
            )

        self.requests = [
            request(self.cars[0], self.customer, "brakes"),
            request(self.cars[1], self.customer, "tyres"),
            request(self.cars[0], self.bystander, "test drive"),
        ]
        self.unrelated = request(self.other_car, self.bystander, "unrelated")

    def test_customer_delete_removes_cars_and_requests(self, caches):
        car_ids = [car.id for car in self.cars]
        self.coordinator.delete(CUSTOMER, self.customer.id)

        remaining = (
            db.session.query(ServiceRequest)
            .filter(
                db.or_(
                    ServiceRequest.customer_id == self.customer.id,
                    ServiceRequest.car_id.in_(car_ids),
                )
            )
            .count()
        )
        assert remaining == 0
        assert db.session.query(Car).filter(Car.id.in_(car_ids)).count() == 0

        for request in self.requests:
            assert caches[SERVICE_REQUEST].get("id", request.id) is None
        for car in self.cars:
            assert caches[CAR].get("id", car.id) is None
            assert caches[CAR].get("vin", car.vin) is None
        assert caches[CUSTOMER].get("id", self.customer.id) is None
        assert caches[CUSTOMER].get("email", self.customer.email) is None

        with pytest.raises(NotFoundError):
            self.coordinator.find_by_id(CUSTOMER, self.customer.id)
        with pytest.raises(NotFoundError):
            self.coordinator.find_by_id(SERVICE_REQUEST, self.requests[2].id)

    def test_customer_delete_leaves_unrelated_entities(self):
        self.coordinator.delete(CUSTOMER, self.customer.id)

        assert self.coordinator.find_by_id(CUSTOMER, self.bystander.id) == self.bystander
        assert self.coordinator.find_by_id(CAR, self.other_car.id) == self.other_car
        assert self.coordinator.find_by_id(SERVICE_CENTER, self.center.id) == self.center
        assert [
            r.id for r in self.coordinator.children("requests_by_service_center", self.center.id)
        ] == [self.unrelated.id]

    def test_car_delete_keeps_service_center_and_owner(self):
        self.coordinator.delete(CAR, self.cars[0].id)

        assert self.coordinator.find_by_id(SERVICE_CENTER, self.center.id) == self.center
        assert self.coordinator.find_by_id(CUSTOMER, self.customer.id) == self.customer
        assert [c.id for c in self.coordinator.children("cars_by_customer", self.customer.id)] == [
            self.cars[1].id
        ]
        assert self.coordinator.children("cars_by_service_center", self.center.id) == []
        assert db.session.query(ServiceRequest).filter_by(car_id=self.cars[0].id).count() == 0

    def test_service_center_delete_cascades_to_requests_only(self, caches):
        self.coordinator.children("service_centers_by_car", self.cars[0].id)
        self.coordinator.delete(SERVICE_CENTER, self.center.id)

        assert db.session.query(ServiceRequest).count() == 0
        assert db.session.query(Car).count() == 3
        assert db.session.query(Customer).count() == 2
        assert db.session.query(ServiceCenter).count() == 0
        assert self.coordinator.children("service_centers_by_car", self.cars[0].id) == []
        for request in [*self.requests, self.unrelated]:
            assert caches[SERVICE_REQUEST].get("id", request.id) is None

    def test_delete_missing_entity_raises_not_found(self):
        with pytest.raises(NotFoundError):
            self.coordinator.delete(CAR, 9999)

    def test_delete_twice_raises_not_found(self):
        self.coordinator.delete(SERVICE_REQUEST, self.requests[0].id)
        with pytest.raises(NotFoundError):
            self.coordinator.delete(SERVICE_REQUEST, self.requests[0].id)


class TestServiceCenterLinks:
    def test_link_is_idempotent_and_unlink_requires_link(
        self, coordinator, customer_data, car_data, center_data
    ):
        owner = coordinator.create(CUSTOMER, customer_data(1))
        car = coordinator.create(CAR, car_data(owner.id))
        center = coordinator.create(SERVICE_CENTER, center_data(1))

        coordinator.link_service_center(car.id, center.id)
        coordinator.link_service_center(car.id, center.id)
        assert [c.id for c in coordinator.children("cars_by_service_center", center.id)] == [
            car.id
        ]

        coordinator.unlink_service_center(car.id, center.id)
        assert coordinator.children("service_centers_by_car", car.id) == []
        with pytest.raises(NotFoundError, match="not registered"):
            coordinator.unlink_service_center(car.id, center.id)

    def test_link_to_missing_center_is_not_found(self, coordinator, customer_data, car_data):
        owner = coordinator.create(CUSTOMER, customer_data(1))
        car = coordinator.create(CAR, car_data(owner.id))
        with pytest.raises(NotFoundError):
            coordinator.link_service_center(car.id, 404)

    def test_children_of_missing_parent_is_not_found(self, coordinator):
        with pytest.raises(NotFoundError):
            coordinator.children("cars_by_customer", 1)
