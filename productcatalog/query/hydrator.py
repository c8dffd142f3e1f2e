"""Batch hydrator.

Fetches full records for the merged identifiers in bounded, concurrent
batches. Unlike index queries, a failed batch fails the whole hydration:
a partial result would silently drop records already counted as matches.
"""

from collections.abc import Iterable

import structlog

from productcatalog.domain.exceptions import HydrationError
from productcatalog.domain.models import Product
from productcatalog.infrastructure.storage import StorageClient
from productcatalog.query.fanout import settle_all

logger = structlog.get_logger()

BATCH_SIZE = 100


def chunk(skus: list[str], size: int) -> list[list[str]]:
    """Split identifiers into consecutive batches of at most ``size``."""
    if size < 1:
        raise ValueError(f"Batch size must be positive, got {size}")
    return [skus[i : i + size] for i in range(0, len(skus), size)]


class BatchHydrator:
    """Turns identifiers into product records."""

    def __init__(self, storage: StorageClient, batch_size: int = BATCH_SIZE) -> None:
        """Initialize hydrator.

        Args:
            storage: Storage client shared by all batches.
            batch_size: Ids per batch read, at most 100.
        """
        if not 1 <= batch_size <= BATCH_SIZE:
            raise ValueError(f"batch_size must be between 1 and {BATCH_SIZE}")
        self.storage = storage
        self.batch_size = batch_size

    async def hydrate(self, skus: Iterable[str]) -> list[Product]:
        """Fetch products for every identifier.

        All batches settle before the outcome is decided.

        Args:
            skus: Deduplicated identifiers.

        Returns:
            Hydrated products in no particular order.

        Raises:
            HydrationError: If any batch failed.
        """
        batches = chunk(list(skus), self.batch_size)
        if not batches:
            return []

        outcomes = await settle_all(self.storage.batch_get(batch) for batch in batches)

        failures = [
            (batch, outcome.error)
            for batch, outcome in zip(batches, outcomes)
            if not outcome.ok
        ]
        if failures:
            batch, error = failures[0]
            logger.error(
                "Hydration failed",
                batch_count=len(batches),
                failed_batches=len(failures),
                error=str(error),
            )
            if isinstance(error, HydrationError) and len(failures) == 1:
                raise error
            raise HydrationError(
                str(error),
                batch_size=len(batch),
                failed_batches=len(failures),
            ) from error

        products = [product for outcome in outcomes for product in outcome.value or []]
        logger.debug(
            "Hydrated products",
            batch_count=len(batches),
            requested=sum(len(b) for b in batches),
            found=len(products),
        )
        return products
