"""Application layer.

Use-case services that coordinate the storage client and the filter
engine.
"""

from productcatalog.application.product_service import (
    ProductService,
    get_product_service,
)

__all__ = [
    "ProductService",
    "get_product_service",
]
