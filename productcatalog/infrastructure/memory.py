"""In-memory storage client.

Dict-backed stand-in for the products table used for local development
and tests. Index queries evaluate the same ``KeyCondition`` values the
planner produces against the stored items.
"""

import asyncio
from copy import deepcopy
from typing import Any

import structlog

from productcatalog.domain.exceptions import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
)
from productcatalog.domain.keys import (
    BRAND_PRICE_INDEX,
    CATEGORY_BRAND_PRICE_INDEX,
    CATEGORY_PRICE_INDEX,
    PRODUCT_NAME_INDEX,
)
from productcatalog.domain.models import Product
from productcatalog.infrastructure.storage import (
    PRIMARY_KEY_ATTR,
    changes_to_attributes,
    item_to_product,
    product_to_item,
)
from productcatalog.query.conditions import KeyCondition

logger = structlog.get_logger()

KNOWN_INDEXES = frozenset(
    {
        PRODUCT_NAME_INDEX,
        BRAND_PRICE_INDEX,
        CATEGORY_BRAND_PRICE_INDEX,
        CATEGORY_PRICE_INDEX,
    }
)


class InMemoryStorageClient:
    """In-memory products table."""

    def __init__(self) -> None:
        self._items: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._items)

    def item(self, sku: str) -> dict[str, Any] | None:
        """Raw stored item, including composite key attributes."""
        item = self._items.get(sku)
        return deepcopy(item) if item is not None else None

    async def query(
        self,
        index_name: str,
        key_condition: KeyCondition,
        projection: str = "identifier",
    ) -> list[str]:
        """Return skus of items matching the key condition."""
        if index_name not in KNOWN_INDEXES:
            raise ValueError(f"Unknown index: {index_name}")

        await asyncio.sleep(0)

        skus: list[str] = []
        for sku, item in self._items.items():
            if item.get(key_condition.partition_attr) != key_condition.partition_value:
                continue
            sort = key_condition.sort
            if sort is not None and not sort.matches(item.get(sort.attribute)):
                continue
            skus.append(sku)
        return skus

    async def batch_get(self, skus: list[str]) -> list[Product]:
        """Fetch products by sku; unknown skus are skipped."""
        await asyncio.sleep(0)
        return [item_to_product(self._items[sku]) for sku in skus if sku in self._items]

    async def get(self, sku: str) -> Product | None:
        """Get product by sku."""
        item = self._items.get(sku)
        return item_to_product(item) if item else None

    async def put(self, product: Product, unique_create: bool = True) -> None:
        """Save a product with every composite key attribute."""
        if unique_create and product.sku in self._items:
            raise AlreadyExistsError(product.sku)
        self._items[product.sku] = product_to_item(product)

    async def update(
        self,
        sku: str,
        changes: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> None:
        """Patch stored attributes; ``None`` values are removed.

        Raises:
            NotFoundError: If the sku does not exist.
            ConflictError: If an ``expected`` value no longer matches.
        """
        if sku not in self._items:
            raise NotFoundError(sku)

        attributes = changes_to_attributes(changes)
        attributes.pop(PRIMARY_KEY_ATTR, None)
        attributes.pop("sku", None)
        if not attributes:
            logger.info("No attributes to update", sku=sku)
            return

        item = self._items[sku]
        for attr, value in changes_to_attributes(expected or {}).items():
            if item.get(attr) != value:
                raise ConflictError(sku)

        for attr, value in attributes.items():
            if value is None:
                item.pop(attr, None)
            else:
                item[attr] = value

    async def delete(self, sku: str) -> None:
        """Delete a product."""
        if self._items.pop(sku, None) is None:
            raise NotFoundError(sku)
