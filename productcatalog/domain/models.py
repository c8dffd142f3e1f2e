"""Domain models for the product catalog.

Plain dataclasses shared by the storage clients, the query engine and the
application services.
"""

from dataclasses import dataclass, field, fields
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

PRICE_QUANTUM = Decimal("0.01")

# Joins brand and price in composite sort keys; never allowed inside a brand.
KEY_SEPARATOR = "#"


def to_price(value: Decimal | float | int | str) -> Decimal:
    """Normalize a price to a two-decimal ``Decimal``.

    Args:
        value: Price in any numeric representation.

    Returns:
        Price rounded half-up to cents.
    """
    return Decimal(str(value)).quantize(PRICE_QUANTUM, rounding=ROUND_HALF_UP)


def check_brand(brand: str) -> None:
    """Reject brands that would collide inside a composite sort key.

    Raises:
        ValueError: If the brand contains ``KEY_SEPARATOR``.
    """
    if KEY_SEPARATOR in brand:
        raise ValueError(f"brand must not contain {KEY_SEPARATOR!r}: {brand!r}")


# ============================================================================
# Product
# ============================================================================


@dataclass
class Product:
    """Product record stored in the catalog table.

    Attributes:
        sku: Primary identifier, unique across the catalog.
        product_name: Display name.
        category: Category name.
        brand: Brand name.
        price: Non-negative price with two decimals.
        stock: Non-negative units in stock.
        description: Optional free text.
    """

    sku: str
    product_name: str
    category: str
    brand: str
    price: Decimal
    stock: int
    description: str | None = None

    def __post_init__(self) -> None:
        check_brand(self.brand)
        self.price = to_price(self.price)
        self.stock = int(self.stock)

    def to_dict(self) -> dict[str, Any]:
        """Return primary attributes as a plain dict."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def apply(self, changes: dict[str, Any]) -> set[str]:
        """Apply a partial update in place.

        Args:
            changes: Attribute values keyed by field name. Only keys present
                are applied, so zero or empty values are real updates.

        Returns:
            Names of fields whose value actually changed.
        """
        changed: set[str] = set()
        for name, value in changes.items():
            if name not in MUTABLE_FIELDS:
                raise KeyError(f"Unknown or immutable product field: {name}")
            if name == "brand":
                check_brand(value)
            elif name == "price":
                value = to_price(value)
            elif name == "stock":
                value = int(value)
            if getattr(self, name) != value:
                setattr(self, name, value)
                changed.add(name)
        return changed


MUTABLE_FIELDS = frozenset(
    {"product_name", "category", "brand", "price", "stock", "description"}
)


# ============================================================================
# Filter Query
# ============================================================================


class OrderBy(str, Enum):
    """Sortable product fields."""

    NAME = "name"
    PRICE = "price"
    STOCK = "stock"
    CATEGORY = "category"
    BRAND = "brand"

    @property
    def attribute(self) -> str:
        """Product attribute this sort field reads."""
        if self is OrderBy.NAME:
            return "product_name"
        return self.value


class OrderDirection(str, Enum):
    """Sort direction."""

    ASC = "ASC"
    DESC = "DESC"


@dataclass
class SortSpec:
    """Requested ordering. ``order_by=None`` keeps hydration order."""

    order_by: OrderBy | None = None
    direction: OrderDirection = OrderDirection.ASC


@dataclass
class PageSpec:
    """Offset pagination window (1-indexed pages)."""

    page: int = 1
    page_size: int = 20

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.page_size


@dataclass
class FilterQuery:
    """Filter, sort and pagination parameters for ``get_by_filters``.

    All predicates are optional. A bound of ``0`` is a real bound; only
    ``None`` means "not set".
    """

    brand: str | None = None
    category: str | None = None
    product_name: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    min_stock: int | None = None
    max_stock: int | None = None
    sort: SortSpec = field(default_factory=SortSpec)
    page: PageSpec = field(default_factory=PageSpec)

    @property
    def has_price_bound(self) -> bool:
        """Whether either price bound is set."""
        return self.min_price is not None or self.max_price is not None

    @property
    def has_stock_bound(self) -> bool:
        """Whether either stock bound is set."""
        return self.min_stock is not None or self.max_stock is not None


# ============================================================================
# Page Result
# ============================================================================


@dataclass
class PageResult:
    """One page of hydrated products.

    Attributes:
        products: Records for the requested page, in final order.
        cursor: Opaque continuation marker, present only when more
            results exist beyond this page.
        total: Number of matching records in the snapshot.
    """

    products: list[Product]
    cursor: str | None = None
    total: int = 0

    @property
    def has_more(self) -> bool:
        """Check if there's a next page."""
        return self.cursor is not None
