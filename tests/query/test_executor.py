"""Tests for the concurrent index query executor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from productcatalog.domain.exceptions import IndexQueryError
from productcatalog.query.conditions import KeyCondition, QuerySpec
from productcatalog.query.executor import QueryExecutor


def _spec(index_name: str, value: str) -> QuerySpec:
    return QuerySpec(
        index_name=index_name,
        key_condition=KeyCondition(partition_attr="pk" + index_name, partition_value=value),
    )


@pytest.fixture
def storage() -> MagicMock:
    """Storage whose query answers depend on the index name."""
    mock = MagicMock()

    async def query(index_name: str, key_condition: KeyCondition, projection: str = "identifier") -> list[str]:
        if index_name == "broken":
            raise IndexQueryError(index_name, "throttled")
        return [f"{index_name}-{key_condition.partition_value}", "shared"]

    mock.query = AsyncMock(side_effect=query)
    return mock


class TestQueryExecutor:
    """Tests for QueryExecutor."""

    @pytest.mark.asyncio
    async def test_concatenates_results(self, storage: MagicMock) -> None:
        """Identifiers of every query are returned, duplicates included."""
        executor = QueryExecutor(storage)

        skus = await executor.execute([_spec("a", "x"), _spec("b", "y")])

        assert skus == ["a-x", "shared", "b-y", "shared"]
        assert storage.query.await_count == 2

    @pytest.mark.asyncio
    async def test_requests_identifier_projection(self, storage: MagicMock) -> None:
        """Queries only project the identifier."""
        spec = _spec("a", "x")

        await QueryExecutor(storage).execute([spec])

        storage.query.assert_awaited_once_with(
            "a", spec.key_condition, projection="identifier"
        )

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_other_results(self, storage: MagicMock) -> None:
        """A failed query contributes nothing and does not raise."""
        executor = QueryExecutor(storage)

        skus = await executor.execute([_spec("a", "x"), _spec("broken", "y")])

        assert skus == ["a-x", "shared"]

    @pytest.mark.asyncio
    async def test_all_failed_returns_empty(self, storage: MagicMock) -> None:
        """When every query fails the result is empty, not an error."""
        executor = QueryExecutor(storage)

        skus = await executor.execute([_spec("broken", "x"), _spec("broken", "y")])

        assert skus == []
        assert storage.query.await_count == 2

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self) -> None:
        """Errors other than IndexQueryError are contained too."""
        storage = MagicMock()
        storage.query = AsyncMock(side_effect=ConnectionError("reset"))

        assert await QueryExecutor(storage).execute([_spec("a", "x")]) == []

    @pytest.mark.asyncio
    async def test_no_specs(self, storage: MagicMock) -> None:
        """No specs means no store calls."""
        assert await QueryExecutor(storage).execute([]) == []
        storage.query.assert_not_called()
