"""API schemas for the product catalog.

Pydantic models for request/response validation and serialization.
JSON fields use camelCase; Python attributes use snake_case.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from productcatalog.domain.keys import MAX_PRICE
from productcatalog.domain.models import KEY_SEPARATOR, OrderBy, OrderDirection, Product

# Brands are embedded in composite sort keys ahead of the separator.
BRAND_PATTERN = rf"^[^{KEY_SEPARATOR}]+$"


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] | dict[str, Any] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    model_config = ConfigDict(populate_by_name=True)

    sku: str = Field(..., min_length=1, max_length=100, description="Unique product identifier")
    product_name: str = Field(..., alias="productName", min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    brand: str = Field(..., min_length=1, max_length=100, pattern=BRAND_PATTERN)
    price: Decimal = Field(..., ge=0, le=MAX_PRICE)
    stock: int = Field(..., ge=0)
    description: str | None = Field(default=None, max_length=1000)

    def to_product(self) -> Product:
        """Convert to a domain product."""
        return Product(
            sku=self.sku,
            product_name=self.product_name,
            category=self.category,
            brand=self.brand,
            price=self.price,
            stock=self.stock,
            description=self.description,
        )


NON_NULLABLE_FIELDS = ("product_name", "category", "brand", "price", "stock")


class ProductUpdateRequest(BaseModel):
    """Partial product update.

    Only fields present in the request body are applied, so ``0`` is a
    valid price or stock value. ``description`` may be set to null to
    clear it.
    """

    model_config = ConfigDict(populate_by_name=True)

    product_name: str | None = Field(default=None, alias="productName", min_length=1, max_length=100)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    brand: str | None = Field(default=None, min_length=1, max_length=100, pattern=BRAND_PATTERN)
    price: Decimal | None = Field(default=None, ge=0, le=MAX_PRICE)
    stock: int | None = Field(default=None, ge=0)
    description: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "ProductUpdateRequest":
        """Reject explicit nulls for fields every product must have."""
        for name in NON_NULLABLE_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Field values explicitly supplied in the request."""
        return self.model_dump(exclude_unset=True)


class ProductResponse(BaseModel):
    """Product representation."""

    model_config = ConfigDict(populate_by_name=True)

    sku: str
    product_name: str = Field(..., alias="productName")
    category: str
    brand: str
    price: float
    stock: int
    description: str | None = None

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        """Build from a domain product."""
        return cls(
            sku=product.sku,
            product_name=product.product_name,
            category=product.category,
            brand=product.brand,
            price=float(product.price),
            stock=product.stock,
            description=product.description,
        )


class ProductFilterParams(BaseModel):
    """Query parameters of the product listing."""

    model_config = ConfigDict(populate_by_name=True)

    brand: str | None = Field(default=None, min_length=1, pattern=BRAND_PATTERN)
    category: str | None = Field(default=None, min_length=1)
    product_name: str | None = Field(default=None, alias="productName", min_length=1)
    min_price: Decimal | None = Field(default=None, alias="minPrice", ge=0, le=MAX_PRICE)
    max_price: Decimal | None = Field(default=None, alias="maxPrice", ge=0, le=MAX_PRICE)
    min_stock: int | None = Field(default=None, alias="minStock", ge=0)
    max_stock: int | None = Field(default=None, alias="maxStock", ge=0)
    order_by: OrderBy | None = Field(default=None, alias="orderBy")
    order_direction: OrderDirection = Field(default=OrderDirection.ASC, alias="orderDirection")
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, alias="pageSize", ge=1)
    cursor: str | None = None

    @model_validator(mode="after")
    def check_ranges(self) -> "ProductFilterParams":
        """Ensure lower bounds do not exceed upper bounds."""
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("minPrice cannot be greater than maxPrice")
        if (
            self.min_stock is not None
            and self.max_stock is not None
            and self.min_stock > self.max_stock
        ):
            raise ValueError("minStock cannot be greater than maxStock")
        return self


class ProductListResponse(BaseModel):
    """One page of products."""

    products: list[ProductResponse]
    cursor: str | None = Field(default=None, description="Continuation marker, present when more results exist")
    page: int
    page_size: int = Field(..., alias="pageSize")
    count: int = Field(..., description="Number of products on this page")
    has_more: bool = Field(..., alias="hasMore")

    model_config = ConfigDict(populate_by_name=True)
