"""Domain layer: product model, composite keys and the error family."""

from productcatalog.domain.exceptions import (
    AlreadyExistsError,
    CatalogError,
    ConfigurationError,
    ConflictError,
    HydrationError,
    IndexQueryError,
    InvalidCursorError,
    NotFoundError,
)
from productcatalog.domain.models import (
    FilterQuery,
    OrderBy,
    OrderDirection,
    PageResult,
    PageSpec,
    Product,
    SortSpec,
)

__all__ = [
    # Models
    "FilterQuery",
    "OrderBy",
    "OrderDirection",
    "PageResult",
    "PageSpec",
    "Product",
    "SortSpec",
    # Exceptions
    "AlreadyExistsError",
    "CatalogError",
    "ConfigurationError",
    "ConflictError",
    "HydrationError",
    "IndexQueryError",
    "InvalidCursorError",
    "NotFoundError",
]
