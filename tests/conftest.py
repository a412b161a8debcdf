"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta

import pytest

from logiflow.config import RelayConfig, SchedulingConfig
from logiflow.exceptions import StoreUnavailable
from logiflow.models import GeoPoint, Order, OrderItem, OrderPriority
from logiflow.persistence import DocumentStore, InMemoryDocumentStore
from logiflow.store import SchedulingStore

#: Fixed start time for every scheduling test
NOW = datetime(2024, 3, 4, 8, 0)


class FakeClock:
    """Controllable clock: call it for the current time, advance it explicitly."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FailingDocumentStore(DocumentStore):
    """Document store whose every call fails."""

    def create(self, collection, record):
        raise StoreUnavailable("Document store offline", {"collection": collection})

    def list(self, collection, order_by=None, descending=False):
        raise StoreUnavailable("Document store offline", {"collection": collection})

    def get(self, collection, document_id):
        raise StoreUnavailable("Document store offline", {"collection": collection})


@pytest.fixture
def clock():
    """Fixture for a controllable clock starting at NOW."""
    return FakeClock()


@pytest.fixture
def depot():
    """Fixture for the depot location."""
    return GeoPoint(lat=0.0, lng=0.0)


@pytest.fixture
def address_book():
    """Fixture for geocoded delivery addresses.

    0.01 degrees of latitude is about 1.11 km.
    """
    return {
        "1 North St": GeoPoint(lat=0.02, lng=0.0),
        "2 North St": GeoPoint(lat=0.03, lng=0.0),
        "9 Far Rd": GeoPoint(lat=0.5, lng=0.0),
    }


@pytest.fixture
def scheduling_config(address_book):
    """Fixture for scheduling configuration with a unit road factor."""
    return SchedulingConfig(
        depot_latitude=0.0,
        depot_longitude=0.0,
        average_speed_kmh=50.0,
        road_factor=1.0,
        cluster_radius_km=5.0,
        stop_service_minutes=10.0,
        address_book=address_book,
    )


@pytest.fixture
def make_order():
    """Factory fixture for orders."""
    counter = {"n": 0}

    def _make(
        priority=OrderPriority.MEDIUM,
        required_production_time=2.0,
        delivery_address="1 North St",
        quantity=5,
        order_id=None,
    ):
        counter["n"] += 1
        n = counter["n"]
        return Order(
            id=order_id or f"order-{n}",
            customer_id=f"customer-{n}",
            delivery_address=delivery_address,
            priority=priority,
            required_production_time=required_production_time,
            items=[OrderItem(id=f"item-{n}", product_id="widget", quantity=quantity)],
        )

    return _make


@pytest.fixture
def store(scheduling_config, clock):
    """Fixture for a store with one line, one vehicle and one driver."""
    return SchedulingStore.with_default_resources(scheduling_config, clock=clock)


@pytest.fixture
def documents():
    """Fixture for an in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def failing_documents():
    """Fixture for a document store that is always unavailable."""
    return FailingDocumentStore()


@pytest.fixture
def relay_config():
    """Fixture for relay configuration."""
    return RelayConfig(log_level="WARNING", seed_default_resources=True)


@pytest.fixture
def app(relay_config, store, documents):
    """Fixture for the Flask relay wired to the test store."""
    from logiflow.api import create_app

    flask_app = create_app(relay_config, store=store, documents=documents)
    flask_app.config['TESTING'] = True
    return flask_app


@pytest.fixture
def client(app):
    """Fixture for the Flask test client."""
    return app.test_client()
