"""
Shared fixtures: in-memory collaborators with no latency and no random
failures, plus helpers to seed tenants and their orders.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from restaurant_admin.core.config import Settings
from restaurant_admin.services.catalog import CatalogService
from restaurant_admin.services.images import MockImageHost
from restaurant_admin.services.orders import OrderAggregator, StatusTransitionManager
from restaurant_admin.services.store import MockDocumentStore

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """A fixed instant ``minutes`` after BASE_TIME."""
    return BASE_TIME + timedelta(minutes=minutes)


def seed_order(store: MockDocumentStore, tenant_id: str, order_id: str, **data: Any) -> None:
    """Seed a tenant document and one of its orders."""
    store.seed(("users", tenant_id), {"name": f"Customer {tenant_id}"})
    store.seed(("users", tenant_id, "orders", order_id), data)


@pytest.fixture
def settings() -> Settings:
    return Settings(env_mode="development", _env_file=None)


@pytest.fixture
def store() -> MockDocumentStore:
    return MockDocumentStore(failure_rate=0.0, min_latency=0.0, max_latency=0.0)


@pytest.fixture
def image_host() -> MockImageHost:
    return MockImageHost(failure_rate=0.0)


@pytest.fixture
def aggregator(store, settings) -> OrderAggregator:
    return OrderAggregator(store, settings)


@pytest.fixture
def transitions(store, settings) -> StatusTransitionManager:
    return StatusTransitionManager(store, settings)


@pytest.fixture
def catalog(store, image_host, settings) -> CatalogService:
    return CatalogService(store, image_host, settings)
