"""Storage client contract and item mapping.

The query engine and application services depend only on
``StorageClient``; ``DynamoDBStorageClient`` and ``InMemoryStorageClient``
implement it.
"""

from decimal import Decimal
from typing import Any, Protocol

from productcatalog.domain.keys import build_index_keys
from productcatalog.domain.models import Product
from productcatalog.query.conditions import KeyCondition

PRIMARY_KEY_ATTR = "pk"

# Stored attribute name for each product field.
ATTRIBUTE_NAMES = {
    "sku": "sku",
    "product_name": "productName",
    "category": "category",
    "brand": "brand",
    "price": "price",
    "stock": "stock",
    "description": "description",
}


class StorageClient(Protocol):
    """Asynchronous key-value store with secondary indexes."""

    async def query(
        self,
        index_name: str,
        key_condition: KeyCondition,
        projection: str = "identifier",
    ) -> list[str]:
        """Return identifiers matching a key condition on one index.

        Raises:
            IndexQueryError: On transport or condition errors.
        """
        ...

    async def batch_get(self, skus: list[str]) -> list[Product]:
        """Fetch full records; missing skus are absent from the result.

        Raises:
            HydrationError: On transport errors.
        """
        ...

    async def get(self, sku: str) -> Product | None:
        """Fetch a single record by sku."""
        ...

    async def put(self, product: Product, unique_create: bool = True) -> None:
        """Store a full record with all composite keys.

        Raises:
            AlreadyExistsError: If ``unique_create`` and the sku exists.
        """
        ...

    async def update(
        self,
        sku: str,
        changes: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> None:
        """Patch stored attributes of an existing record.

        ``changes`` holds product fields and/or composite key attributes.
        An empty mapping is a logged no-op. ``expected`` holds product
        field values the write depends on; the write is applied only if
        every one of them still matches the stored record.

        Raises:
            NotFoundError: If the sku does not exist.
            ConflictError: If an expected value no longer matches.
        """
        ...

    async def delete(self, sku: str) -> None:
        """Remove a record.

        Raises:
            NotFoundError: If the sku does not exist.
        """
        ...


def product_to_item(product: Product) -> dict[str, Any]:
    """Serialize a product into a store item with every composite key.

    Args:
        product: Product to serialize.

    Returns:
        Item ready to be written.
    """
    item: dict[str, Any] = {PRIMARY_KEY_ATTR: product.sku}
    for field_name, attr in ATTRIBUTE_NAMES.items():
        value = getattr(product, field_name)
        if value is not None:
            item[attr] = value
    item.update(build_index_keys(product))
    return item


def item_to_product(item: dict[str, Any]) -> Product:
    """Deserialize a store item into a product.

    Args:
        item: Item as returned by the store.

    Returns:
        Product built from the primary attributes.
    """
    return Product(
        sku=item.get("sku") or item[PRIMARY_KEY_ATTR],
        product_name=item.get("productName", ""),
        category=item.get("category", ""),
        brand=item.get("brand", ""),
        price=Decimal(str(item.get("price", 0))),
        stock=int(item.get("stock", 0)),
        description=item.get("description"),
    )


def changes_to_attributes(changes: dict[str, Any]) -> dict[str, Any]:
    """Rename product field names to stored attribute names.

    Keys that are not product fields (composite key attributes) pass
    through unchanged.
    """
    return {ATTRIBUTE_NAMES.get(name, name): value for name, value in changes.items()}
