"""Composite secondary-index keys.

Each product item carries derived key attributes that exist only to
populate a secondary index. Keys are a pure function of the primary
attributes, so they are rebuilt whenever an attribute they encode changes.

Index layout:

    productNameIndex          pkProductName = <product_name>
    brandPriceIndex           pkBrandPrice = <brand>
                              skBrandPrice = <price12>
    categoryBrandPriceIndex   pkCategoryBrandPrice = <category>
                              skCategoryBrandPrice = <brand>#<price12>
    categoryPriceIndex        category (native) / price (native, number)

``<price12>`` is the price with two decimals, zero-padded to twelve
characters, so lexical order on the sort key equals numeric order.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from productcatalog.domain.models import KEY_SEPARATOR, Product, to_price

PRICE_WIDTH = 12
MIN_PRICE = Decimal("0.00")
MAX_PRICE = Decimal("999999999.99")

PRODUCT_NAME_INDEX = "productNameIndex"
BRAND_PRICE_INDEX = "brandPriceIndex"
CATEGORY_BRAND_PRICE_INDEX = "categoryBrandPriceIndex"
CATEGORY_PRICE_INDEX = "categoryPriceIndex"


@dataclass(frozen=True)
class CompositeKey:
    """Definition of one derived (partition, sort) key pair.

    Attributes:
        index_name: Secondary index populated by this key.
        partition_attr: Item attribute holding the partition key.
        sort_attr: Item attribute holding the sort key, if any.
        depends_on: Product fields encoded in the key.
    """

    index_name: str
    partition_attr: str
    sort_attr: str | None
    depends_on: frozenset[str]


PRODUCT_NAME_KEY = CompositeKey(
    index_name=PRODUCT_NAME_INDEX,
    partition_attr="pkProductName",
    sort_attr=None,
    depends_on=frozenset({"product_name"}),
)
BRAND_PRICE_KEY = CompositeKey(
    index_name=BRAND_PRICE_INDEX,
    partition_attr="pkBrandPrice",
    sort_attr="skBrandPrice",
    depends_on=frozenset({"brand", "price"}),
)
CATEGORY_BRAND_PRICE_KEY = CompositeKey(
    index_name=CATEGORY_BRAND_PRICE_INDEX,
    partition_attr="pkCategoryBrandPrice",
    sort_attr="skCategoryBrandPrice",
    depends_on=frozenset({"category", "brand", "price"}),
)

COMPOSITE_KEYS: tuple[CompositeKey, ...] = (
    PRODUCT_NAME_KEY,
    BRAND_PRICE_KEY,
    CATEGORY_BRAND_PRICE_KEY,
)

# Keyed on native attributes, never derived.
CATEGORY_PRICE_PARTITION_ATTR = "category"
CATEGORY_PRICE_SORT_ATTR = "price"


def encode_price(price: Decimal | float | int | str) -> str:
    """Encode a price as a fixed-width sortable string.

    Args:
        price: Non-negative price no greater than ``MAX_PRICE``.

    Returns:
        Zero-padded price, e.g. ``"000000099.99"``.

    Raises:
        ValueError: If the price is negative or too large to encode.
    """
    value = to_price(price)
    if value < MIN_PRICE or value > MAX_PRICE:
        raise ValueError(f"Price {value} outside encodable range 0..{MAX_PRICE}")
    return f"{value:0{PRICE_WIDTH}.2f}"


def brand_price_sort_key(brand: str, price: Decimal | float | int | str) -> str:
    """Sort key of ``categoryBrandPriceIndex`` for a brand and price."""
    return f"{brand}{KEY_SEPARATOR}{encode_price(price)}"


def _key_values(key: CompositeKey, product: Product) -> dict[str, str]:
    if key is PRODUCT_NAME_KEY:
        return {key.partition_attr: product.product_name}
    if key is BRAND_PRICE_KEY:
        return {
            key.partition_attr: product.brand,
            key.sort_attr: encode_price(product.price),
        }
    if key is CATEGORY_BRAND_PRICE_KEY:
        return {
            key.partition_attr: product.category,
            key.sort_attr: brand_price_sort_key(product.brand, product.price),
        }
    raise ValueError(f"Unknown composite key for index {key.index_name}")


def build_index_keys(product: Product) -> dict[str, str]:
    """Build every composite key attribute for a product.

    Args:
        product: Product to derive keys from.

    Returns:
        Key attribute values keyed by attribute name.
    """
    keys: dict[str, str] = {}
    for key in COMPOSITE_KEYS:
        keys.update(_key_values(key, product))
    return keys


def affected_keys(changed_fields: Iterable[str]) -> list[CompositeKey]:
    """Return the composite keys that encode any of the changed fields."""
    changed = frozenset(changed_fields)
    return [key for key in COMPOSITE_KEYS if key.depends_on & changed]


def recompute_keys(product: Product, changed_fields: Iterable[str]) -> dict[str, str]:
    """Rebuild only the composite keys affected by a partial update.

    Args:
        product: Product with the update already applied.
        changed_fields: Names of the fields the update changed.

    Returns:
        Attribute values for the affected keys; empty when no key
        encodes a changed field.
    """
    keys: dict[str, str] = {}
    for key in affected_keys(changed_fields):
        keys.update(_key_values(key, product))
    return keys


def key_attributes() -> set[str]:
    """Names of every derived key attribute stored on an item."""
    names: set[str] = set()
    for key in COMPOSITE_KEYS:
        names.add(key.partition_attr)
        if key.sort_attr:
            names.add(key.sort_attr)
    return names
