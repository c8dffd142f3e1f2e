"""Shared fixtures for API tests."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from productcatalog.infrastructure import set_storage_client
from productcatalog.infrastructure.memory import InMemoryStorageClient
from productcatalog.main import app


@pytest.fixture
def memory_storage() -> Iterator[InMemoryStorageClient]:
    """Install a fresh in-memory storage client for one test."""
    storage = InMemoryStorageClient()
    set_storage_client(storage)
    yield storage
    set_storage_client(None)


@pytest.fixture
def client(memory_storage: InMemoryStorageClient) -> TestClient:
    """Create test client backed by in-memory storage."""
    return TestClient(app)


@pytest.fixture
def product_payload() -> dict:
    """Valid create request body."""
    return {
        "sku": "API-1",
        "productName": "Acme Lamp",
        "category": "Home",
        "brand": "Acme",
        "price": 24.99,
        "stock": 8,
        "description": "Desk lamp",
    }
