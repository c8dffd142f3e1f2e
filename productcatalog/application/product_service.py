"""Product application service.

Use cases for single-record create/read/update/delete and the filtered
listing. Each use case logs its input, its outcome, and any failure
before re-raising it.
"""

import asyncio
from typing import Any

import structlog

from productcatalog.domain.exceptions import ConflictError, NotFoundError
from productcatalog.domain.keys import affected_keys, recompute_keys
from productcatalog.domain.models import FilterQuery, PageResult, Product
from productcatalog.infrastructure import get_storage_client, settings
from productcatalog.infrastructure.storage import StorageClient
from productcatalog.query.engine import FilterEngine

logger = structlog.get_logger()

MAX_UPDATE_ATTEMPTS = 3
CONFLICT_BACKOFF_SECONDS = 0.05


class ProductService:
    """Service for product catalog operations.

    Example usage:
        service = get_product_service()
        product = await service.create_product(Product(...))
        page = await service.get_products(FilterQuery(brand="Acme"))
    """

    def __init__(
        self,
        storage: StorageClient,
        engine: FilterEngine | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            storage: Storage client.
            engine: Filter engine; built on ``storage`` when omitted.
            request_id: Request ID for log correlation.
        """
        self.storage = storage
        self.engine = engine or FilterEngine(
            storage, batch_size=settings.hydration_batch_size
        )
        self.request_id = request_id

    async def create_product(self, product: Product) -> Product:
        """Create a product; composite keys are derived on write.

        Raises:
            AlreadyExistsError: If the sku is already stored.
        """
        try:
            logger.debug("Creating product", sku=product.sku, request_id=self.request_id)

            await self.storage.put(product, unique_create=True)

            logger.info("Product created", sku=product.sku, request_id=self.request_id)
            return product
        except Exception as e:
            logger.error(
                "Error creating product",
                sku=product.sku,
                error=str(e),
                request_id=self.request_id,
            )
            raise

    async def get_product(self, sku: str) -> Product:
        """Get a product by sku.

        Raises:
            NotFoundError: If no product has this sku.
        """
        logger.debug("Getting product", sku=sku, request_id=self.request_id)

        product = await self.storage.get(sku)
        if product is None:
            logger.info("Product not found", sku=sku, request_id=self.request_id)
            raise NotFoundError(sku)

        logger.info("Product retrieved", sku=sku, request_id=self.request_id)
        return product

    async def update_product(self, sku: str, changes: dict[str, Any]) -> Product:
        """Apply a partial update.

        Only the supplied fields are written, together with the composite
        keys that encode any field whose value changed. The write is
        conditional on the fields those keys were rebuilt from; if another
        write changed them in between, the record is read again and the
        update reapplied.

        Args:
            sku: Product identifier.
            changes: Field values keyed by product field name.

        Returns:
            The updated product.

        Raises:
            NotFoundError: If no product has this sku.
            ConflictError: If the record kept changing for every attempt.
        """
        try:
            logger.debug(
                "Updating product",
                sku=sku,
                fields=sorted(changes),
                request_id=self.request_id,
            )

            for attempt in range(MAX_UPDATE_ATTEMPTS):
                product = await self.storage.get(sku)
                if product is None:
                    raise NotFoundError(sku)

                before = product.to_dict()
                changed = product.apply(changes)
                if not changed:
                    logger.info("Product unchanged", sku=sku, request_id=self.request_id)
                    return product

                attributes: dict[str, Any] = {name: getattr(product, name) for name in changed}
                attributes.update(recompute_keys(product, changed))
                expected = {
                    name: before[name]
                    for key in affected_keys(changed)
                    for name in key.depends_on
                }

                try:
                    await self.storage.update(sku, attributes, expected=expected)
                except ConflictError:
                    if attempt == MAX_UPDATE_ATTEMPTS - 1:
                        raise ConflictError(sku, attempts=MAX_UPDATE_ATTEMPTS)
                    wait_time = (2**attempt) * CONFLICT_BACKOFF_SECONDS
                    logger.warning(
                        "Concurrent update, retrying",
                        sku=sku,
                        attempt=attempt + 1,
                        wait_time=wait_time,
                        request_id=self.request_id,
                    )
                    await asyncio.sleep(wait_time)
                    continue

                logger.info(
                    "Product updated",
                    sku=sku,
                    changed=sorted(changed),
                    request_id=self.request_id,
                )
                return product

            raise ConflictError(sku, attempts=MAX_UPDATE_ATTEMPTS)
        except Exception as e:
            logger.error(
                "Error updating product",
                sku=sku,
                error=str(e),
                request_id=self.request_id,
            )
            raise

    async def delete_product(self, sku: str) -> None:
        """Delete a product.

        Raises:
            NotFoundError: If no product has this sku.
        """
        try:
            logger.debug("Deleting product", sku=sku, request_id=self.request_id)

            await self.storage.delete(sku)

            logger.info("Product deleted", sku=sku, request_id=self.request_id)
        except Exception as e:
            logger.error(
                "Error deleting product",
                sku=sku,
                error=str(e),
                request_id=self.request_id,
            )
            raise

    async def get_products(self, filters: FilterQuery) -> PageResult:
        """List products matching filters.

        Raises:
            ConfigurationError: If no filter criterion is set.
            HydrationError: If fetching matched records failed.
        """
        try:
            logger.debug(
                "Getting products",
                brand=filters.brand,
                category=filters.category,
                product_name=filters.product_name,
                min_price=str(filters.min_price) if filters.min_price is not None else None,
                max_price=str(filters.max_price) if filters.max_price is not None else None,
                min_stock=filters.min_stock,
                max_stock=filters.max_stock,
                request_id=self.request_id,
            )

            result = await self.engine.get_by_filters(filters)

            logger.info(
                "Products retrieved",
                count=len(result.products),
                request_id=self.request_id,
            )
            return result
        except Exception as e:
            logger.error(
                "Error getting products",
                error=str(e),
                error_type=type(e).__name__,
                request_id=self.request_id,
            )
            raise


# ============================================================================
# Service Factory
# ============================================================================


def get_product_service(request_id: str | None = None) -> ProductService:
    """Get product service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        ProductService bound to the configured storage client.
    """
    return ProductService(get_storage_client(), request_id=request_id)
