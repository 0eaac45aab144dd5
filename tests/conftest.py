"""
Pytest configuration and shared fixtures.

Provides a test application, the consistency coordinator, a test client
and small factories for building a customer -> car -> request graph.
Every test gets its own application, so its in-memory database and its
entity caches both start empty.
"""

import pytest

from repair_shop import create_app
from repair_shop.extensions import db as _db
from repair_shop.extensions import entity_cache


@pytest.fixture(scope="function")
def app():
    """
    Create a Flask application configured for testing.

    The ``testing`` config uses an in-memory SQLite database; the schema
    is created from the models and dropped again after the test.
    """
    app = create_app("testing")

    # Establish an application context for the whole test.
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()
    entity_cache.shutdown(app)


@pytest.fixture(scope="function")
def file_app(tmp_path):
    """
    Application backed by a SQLite file, for tests that run several
    threads.  Each thread pushes its own app context and therefore
    talks to the store through its own session and connection.
    """
    database_url = f"sqlite:///{tmp_path / 'repair_shop_test.db'}"
    app = create_app("testing", overrides={"SQLALCHEMY_DATABASE_URI": database_url})

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()
    entity_cache.shutdown(app)


@pytest.fixture(scope="function")
def coordinator(app):  # pylint: disable=redefined-outer-name
    """The consistency coordinator of the test application."""
    return entity_cache.coordinator


@pytest.fixture(scope="function")
def caches(app):  # pylint: disable=redefined-outer-name
    """Per-kind ``IndexedCache`` instances, keyed by kind name."""
    return entity_cache.registry.caches


@pytest.fixture(scope="function")
def client(app):  # pylint: disable=redefined-outer-name
    """
    Provide a Flask test client for making HTTP requests.

    Usage in tests::

        def test_health(client):
            response = client.get("/health")
            assert response.status_code == 200
    """
    with app.test_client() as test_client:
        yield test_client


# -- Payload factories -------------------------------------------------------


@pytest.fixture
def customer_data():
    """Return a factory of valid customer payloads, unique per ``n``."""

    def make(n: int = 1, **overrides) -> dict:
        data = {
            "first_name": f"First{n}",
            "last_name": f"Last{n}",
            "email": f"customer{n}@example.com",
            "phone": f"+1 555-01{n:02d}",
        }
        data.update(overrides)
        return data

    return make


@pytest.fixture
def car_data():
    """Return a factory of valid car payloads for a given owner."""

    def make(customer_id: int, n: int = 1, **overrides) -> dict:
        data = {
            "brand": "Toyota",
            "model": f"Corolla {n}",
            "vin": f"VIN{n:05d}",
            "year": 2015,
            "customer_id": customer_id,
        }
        data.update(overrides)
        return data

    return make


@pytest.fixture
def center_data():
    """Return a factory of valid service center payloads."""

    def make(n: int = 1, **overrides) -> dict:
        data = {
            "name": f"Fix {n}",
            "address": f"{n} Main St",
            "phone": f"555-02{n:02d}",
        }
        data.update(overrides)
        return data

    return make
