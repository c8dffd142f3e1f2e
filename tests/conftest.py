"""Shared fixtures for product catalog tests."""

from decimal import Decimal
from typing import Any, Callable

import pytest
import pytest_asyncio

from productcatalog.domain.models import Product
from productcatalog.infrastructure.memory import InMemoryStorageClient


def build_product(**overrides: Any) -> Product:
    """Create a product with sensible defaults."""
    data: dict[str, Any] = {
        "sku": "TEST-001",
        "product_name": "Test Product",
        "category": "Electronics",
        "brand": "Acme",
        "price": Decimal("99.99"),
        "stock": 10,
        "description": "A test product",
    }
    data.update(overrides)
    return Product(**data)


@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for products with overridable fields."""
    return build_product


@pytest.fixture
def storage() -> InMemoryStorageClient:
    """Empty in-memory storage client."""
    return InMemoryStorageClient()


@pytest.fixture
def catalog_products() -> list[Product]:
    """Small mixed catalog across brands, categories and prices."""
    return [
        build_product(sku="E-1", product_name="Acme Monitor", category="Electronics", brand="Acme", price=Decimal("15.00"), stock=3),
        build_product(sku="E-2", product_name="Acme Router", category="Electronics", brand="Acme", price=Decimal("45.50"), stock=0),
        build_product(sku="E-3", product_name="Acme Webcam", category="Electronics", brand="Acme", price=Decimal("75.00"), stock=12),
        build_product(sku="E-4", product_name="Globex Keyboard", category="Electronics", brand="Globex", price=Decimal("30.00"), stock=7),
        build_product(sku="A-1", product_name="Acme Speaker", category="Audio", brand="Acme", price=Decimal("25.00"), stock=20),
        build_product(sku="A-2", product_name="Globex Earbuds", category="Audio", brand="Globex", price=Decimal("0.00"), stock=5),
        build_product(sku="T-1", product_name="Initech Robot", category="Toys", brand="Initech", price=Decimal("12.49"), stock=1),
    ]


@pytest_asyncio.fixture
async def seeded_storage(
    storage: InMemoryStorageClient,
    catalog_products: list[Product],
) -> InMemoryStorageClient:
    """In-memory storage holding ``catalog_products``."""
    for product in catalog_products:
        await storage.put(product)
    return storage
