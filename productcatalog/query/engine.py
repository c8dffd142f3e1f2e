"""Multi-index filter engine.

Flow: plan -> execute (concurrent) -> merge -> hydrate (concurrent
batches) -> stock post-filter -> sort -> paginate.
"""

import structlog

from productcatalog.domain.models import FilterQuery, PageResult
from productcatalog.infrastructure.storage import StorageClient
from productcatalog.query.executor import QueryExecutor
from productcatalog.query.hydrator import BATCH_SIZE, BatchHydrator
from productcatalog.query.merger import merge
from productcatalog.query.paginate import filter_stock, finalize
from productcatalog.query.planner import plan

logger = structlog.get_logger()


class FilterEngine:
    """Answers filter queries from secondary indexes.

    Example usage:
        engine = FilterEngine(get_storage_client())
        result = await engine.get_by_filters(
            FilterQuery(
                category="Electronics",
                brand="Acme",
                min_price=Decimal("10"),
                sort=SortSpec(order_by=OrderBy.PRICE),
            )
        )
    """

    def __init__(self, storage: StorageClient, batch_size: int = BATCH_SIZE) -> None:
        """Initialize engine.

        Args:
            storage: Storage client, shared read-only by every concurrent
                query and batch of a call.
            batch_size: Ids per hydration batch.
        """
        self.storage = storage
        self.executor = QueryExecutor(storage)
        self.hydrator = BatchHydrator(storage, batch_size=batch_size)

    async def get_by_filters(self, filters: FilterQuery) -> PageResult:
        """Return one page of products matching the filters.

        Args:
            filters: Filter, sort and pagination parameters.

        Returns:
            Page of products with an optional continuation cursor.

        Raises:
            ConfigurationError: If no filter criterion is set. Raised
                before any store call.
            HydrationError: If any hydration batch failed.
        """
        specs = plan(filters)

        skus = await self.executor.execute(specs)
        unique_skus = merge(skus)
        products = await self.hydrator.hydrate(unique_skus)
        products = filter_stock(products, filters.min_stock, filters.max_stock)
        result = finalize(products, filters.sort, filters.page)

        logger.info(
            "Filter query completed",
            indexes=[spec.index_name for spec in specs],
            matched=len(skus),
            unique=len(unique_skus),
            after_stock_filter=len(products),
            page=filters.page.page,
            page_size=filters.page.page_size,
            returned=len(result.products),
            has_more=result.has_more,
        )
        return result
