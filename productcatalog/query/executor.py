"""Concurrent index query executor."""

import structlog

from productcatalog.infrastructure.storage import StorageClient
from productcatalog.query.conditions import QuerySpec
from productcatalog.query.fanout import settle_all

logger = structlog.get_logger()


class QueryExecutor:
    """Runs planned index queries concurrently.

    Each query succeeds or fails on its own. A failed query is logged and
    contributes no identifiers; it never aborts its siblings or raises to
    the caller.
    """

    def __init__(self, storage: StorageClient) -> None:
        """Initialize executor.

        Args:
            storage: Storage client shared by all queries of one call.
        """
        self.storage = storage

    async def execute(self, specs: list[QuerySpec]) -> list[str]:
        """Run every spec and concatenate the identifiers of the ones
        that succeeded.

        Args:
            specs: Planned index queries.

        Returns:
            Identifiers from successful queries, duplicates included.
        """
        outcomes = await settle_all(
            self.storage.query(
                spec.index_name,
                spec.key_condition,
                projection="identifier",
            )
            for spec in specs
        )

        skus: list[str] = []
        failed = 0
        for spec, outcome in zip(specs, outcomes):
            if outcome.ok:
                skus.extend(outcome.value or [])
                continue

            failed += 1
            logger.warning(
                "Index query failed",
                index=spec.index_name,
                condition=spec.key_condition.describe(),
                error=str(outcome.error),
                error_type=type(outcome.error).__name__,
            )

        if specs and failed == len(specs):
            # Indistinguishable from "no matches" for the caller.
            logger.error(
                "All index queries failed",
                indexes=[spec.index_name for spec in specs],
            )

        logger.debug(
            "Index queries settled",
            query_count=len(specs),
            failed_count=failed,
            id_count=len(skus),
        )
        return skus
