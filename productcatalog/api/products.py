"""Product API endpoints.

Provides create/read/update/delete by sku and the filtered listing.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import ValidationError

from productcatalog.api.schemas import (
    ErrorResponse,
    ProductCreateRequest,
    ProductFilterParams,
    ProductListResponse,
    ProductResponse,
    ProductUpdateRequest,
)
from productcatalog.application.product_service import ProductService, get_product_service
from productcatalog.domain.models import FilterQuery, PageSpec, SortSpec
from productcatalog.infrastructure.config import settings
from productcatalog.query.paginate import decode_cursor

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> ProductService:
    """Get product service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_product_service(request_id=request_id)


def _validation_error(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={
            "error_code": "VALIDATION_ERROR",
            "message": "Invalid query parameters",
            "details": [
                {
                    "field": ".".join(str(p) for p in err["loc"]) or None,
                    "message": err["msg"],
                }
                for err in exc.errors()
            ],
        },
    )


def get_filter_params(
    brand: Annotated[str | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
    product_name: Annotated[str | None, Query(alias="productName")] = None,
    min_price: Annotated[Decimal | None, Query(alias="minPrice")] = None,
    max_price: Annotated[Decimal | None, Query(alias="maxPrice")] = None,
    min_stock: Annotated[int | None, Query(alias="minStock")] = None,
    max_stock: Annotated[int | None, Query(alias="maxStock")] = None,
    order_by: Annotated[str | None, Query(alias="orderBy")] = None,
    order_direction: Annotated[str, Query(alias="orderDirection")] = "ASC",
    page: Annotated[int, Query()] = 1,
    page_size: Annotated[int | None, Query(alias="pageSize")] = None,
    cursor: Annotated[str | None, Query()] = None,
) -> ProductFilterParams:
    """Collect and validate listing query parameters."""
    if page_size is None:
        page_size = settings.default_page_size
    if page_size > settings.max_page_size:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error_code": "VALIDATION_ERROR",
                "message": f"pageSize cannot exceed {settings.max_page_size}",
                "details": [{"field": "pageSize", "message": "too large"}],
            },
        )

    try:
        return ProductFilterParams(
            brand=brand,
            category=category,
            product_name=product_name,
            min_price=min_price,
            max_price=max_price,
            min_stock=min_stock,
            max_stock=max_stock,
            order_by=order_by,
            order_direction=order_direction,
            page=page,
            page_size=page_size,
            cursor=cursor,
        )
    except ValidationError as e:
        raise _validation_error(e) from e


def to_filter_query(params: ProductFilterParams) -> FilterQuery:
    """Convert listing parameters to an engine filter query.

    A cursor, when given, selects the page it continues from.

    Raises:
        InvalidCursorError: If the cursor is malformed.
    """
    page = params.page
    if params.cursor:
        _, page = decode_cursor(params.cursor)

    return FilterQuery(
        brand=params.brand,
        category=params.category,
        product_name=params.product_name,
        min_price=params.min_price,
        max_price=params.max_price,
        min_stock=params.min_stock,
        max_stock=params.max_stock,
        sort=SortSpec(order_by=params.order_by, direction=params.order_direction),
        page=PageSpec(page=page, page_size=params.page_size),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="List products",
    description="Filter products by brand, category, name, price and stock.",
)
async def list_products(
    params: Annotated[ProductFilterParams, Depends(get_filter_params)],
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductListResponse:
    """List products matching the filters.

    At least one of productName, category or brand is required.

    Args:
        params: Validated query parameters.
        service: Product service.

    Returns:
        One page of products with an optional continuation cursor.
    """
    filters = to_filter_query(params)
    result = await service.get_products(filters)

    return ProductListResponse(
        products=[ProductResponse.from_product(p) for p in result.products],
        cursor=result.cursor,
        page=filters.page.page,
        page_size=filters.page.page_size,
        count=len(result.products),
        has_more=result.has_more,
    )


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Create product",
)
async def create_product(
    request: ProductCreateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Create a product.

    Raises:
        AlreadyExistsError: If the sku already exists.
    """
    product = await service.create_product(request.to_product())
    return ProductResponse.from_product(product)


@router.get(
    "/{sku}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    sku: str,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Get a product by sku."""
    product = await service.get_product(sku)
    return ProductResponse.from_product(product)


@router.patch(
    "/{sku}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Update product",
    description="Apply a partial update; only supplied fields change.",
)
async def update_product(
    sku: str,
    request: ProductUpdateRequest,
    service: Annotated[ProductService, Depends(get_service)],
) -> ProductResponse:
    """Partially update a product."""
    product = await service.update_product(sku, request.changes())
    return ProductResponse.from_product(product)


@router.delete(
    "/{sku}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(
    sku: str,
    service: Annotated[ProductService, Depends(get_service)],
) -> Response:
    """Delete a product by sku."""
    await service.delete_product(sku)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
