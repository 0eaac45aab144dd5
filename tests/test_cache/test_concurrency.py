"""
Concurrent updates and reads against one entity.

Runs on a SQLite file so every thread has its own connection and
session, the way request threads do under waitress.
"""

import threading

from repair_shop.extensions import db, entity_cache
from repair_shop.models import Customer
from repair_shop.services import customer_service

WORKERS = 8


def as_tuple(record):
    return (record.first_name, record.last_name, record.email, record.phone)


class TestConcurrentUpdates:
    def test_readers_never_observe_a_mixed_entity(self, file_app, customer_data):
        original = customer_service.create(customer_data(0))
        payloads = [customer_data(n) for n in range(1, WORKERS + 1)]
        allowed = {as_tuple(original)} | {
            (p["first_name"], p["last_name"], p["email"], p["phone"]) for p in payloads
        }
        observed = []
        errors = []
        start = threading.Barrier(WORKERS)

        def worker(payload):
            try:
                with file_app.app_context():
                    start.wait()
                    customer_service.update(original.id, payload)
                    observed.append(as_tuple(customer_service.get_by_id(original.id)))
                    observed.append(as_tuple(customer_service.get_by_id(original.id)))
            except Exception as exc:  # pylint: disable=broad-exception-caught
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(p,)) for p in payloads]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert errors == []
        assert len(observed) == 2 * WORKERS
        assert set(observed) <= allowed

        # The cache ends on the value the store committed last.
        cached = customer_service.get_by_id(original.id)
        row = db.session.get(Customer, original.id, populate_existing=True)
        assert as_tuple(cached) == (row.first_name, row.last_name, row.email, row.phone)

    def test_concurrent_reads_after_clear_match_the_store(self, file_app, customer_data):
        created = [customer_service.create(customer_data(n)) for n in range(1, 6)]
        entity_cache.coordinator.reset()
        results = []
        errors = []

        def reader(record):
            try:
                with file_app.app_context():
                    results.append(customer_service.get_by_id(record.id) == record)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                errors.append(exc)

        threads = [
            threading.Thread(target=reader, args=(record,))
            for record in created
            for _ in range(3)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        assert errors == []
        assert results == [True] * len(threads)

