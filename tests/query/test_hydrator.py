"""Tests for the batch hydrator."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from productcatalog.domain.exceptions import HydrationError
from productcatalog.domain.models import Product
from productcatalog.query.hydrator import BatchHydrator, chunk


def _product(sku: str) -> Product:
    return Product(
        sku=sku,
        product_name=f"Product {sku}",
        category="Electronics",
        brand="Acme",
        price=1,
        stock=1,
    )


def _storage(fail_on: set[int] | None = None) -> MagicMock:
    """Storage whose batch_get fails for the listed call numbers."""
    mock = MagicMock()
    calls = {"n": 0}

    async def batch_get(skus: list[str]) -> list[Product]:
        call = calls["n"]
        calls["n"] += 1
        if fail_on and call in fail_on:
            raise HydrationError("throttled", batch_size=len(skus))
        return [_product(sku) for sku in skus]

    mock.batch_get = AsyncMock(side_effect=batch_get)
    return mock


class TestChunk:
    """Tests for chunk."""

    def test_splits_with_remainder(self) -> None:
        """Last batch holds the remainder."""
        batches = chunk([str(i) for i in range(250)], 100)

        assert [len(b) for b in batches] == [100, 100, 50]

    def test_empty(self) -> None:
        """No ids give no batches."""
        assert chunk([], 100) == []

    def test_rejects_zero_size(self) -> None:
        """Batch size must be positive."""
        with pytest.raises(ValueError):
            chunk(["a"], 0)


class TestBatchHydrator:
    """Tests for BatchHydrator."""

    @pytest.mark.asyncio
    async def test_hydrates_in_batches_of_100(self) -> None:
        """250 ids take three batch reads."""
        storage = _storage()
        skus = [f"SKU-{i:03d}" for i in range(250)]

        products = await BatchHydrator(storage).hydrate(skus)

        assert storage.batch_get.await_count == 3
        sizes = sorted(len(call.args[0]) for call in storage.batch_get.await_args_list)
        assert sizes == [50, 100, 100]
        assert {p.sku for p in products} == set(skus)

    @pytest.mark.asyncio
    async def test_empty_makes_no_calls(self) -> None:
        """Nothing to hydrate means no store calls."""
        storage = _storage()

        assert await BatchHydrator(storage).hydrate([]) == []
        storage.batch_get.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_failure_raises_original(self) -> None:
        """One failed batch fails the call with its own error."""
        storage = _storage(fail_on={1})

        with pytest.raises(HydrationError) as exc_info:
            await BatchHydrator(storage).hydrate([f"SKU-{i}" for i in range(150)])

        assert "throttled" in exc_info.value.message
        assert storage.batch_get.await_count == 2

    @pytest.mark.asyncio
    async def test_multiple_failures_counted(self) -> None:
        """Several failed batches are reported together."""
        storage = _storage(fail_on={0, 2})

        with pytest.raises(HydrationError) as exc_info:
            await BatchHydrator(storage, batch_size=10).hydrate([f"SKU-{i}" for i in range(30)])

        assert exc_info.value.details["failed_batches"] == 2

    @pytest.mark.asyncio
    async def test_foreign_error_wrapped(self) -> None:
        """Non-hydration errors are wrapped in HydrationError."""
        storage = MagicMock()
        storage.batch_get = AsyncMock(side_effect=TimeoutError("slow"))

        with pytest.raises(HydrationError) as exc_info:
            await BatchHydrator(storage).hydrate(["A"])

        assert isinstance(exc_info.value.__cause__, TimeoutError)

    @pytest.mark.parametrize("batch_size", [0, 101])
    def test_batch_size_bounds(self, batch_size: int) -> None:
        """Batch size must stay within 1..100."""
        with pytest.raises(ValueError):
            BatchHydrator(MagicMock(), batch_size=batch_size)
