"""Tests for stock filtering, sorting and pagination."""

import base64
from decimal import Decimal
from typing import Callable

import pytest

from productcatalog.domain.exceptions import InvalidCursorError
from productcatalog.domain.models import (
    OrderBy,
    OrderDirection,
    PageSpec,
    Product,
    SortSpec,
)
from productcatalog.query.paginate import (
    decode_cursor,
    encode_cursor,
    filter_stock,
    finalize,
    paginate,
    sort_products,
)


@pytest.fixture
def records(make_product: Callable[..., Product]) -> list[Product]:
    """25 products with distinct prices and stock."""
    return [
        make_product(sku=f"SKU-{i:02d}", price=Decimal(i), stock=i % 7)
        for i in range(25)
    ]


class TestFilterStock:
    """Tests for filter_stock."""

    def test_inclusive_bounds(self, records: list[Product]) -> None:
        """Both bounds are inclusive."""
        kept = filter_stock(records, min_stock=2, max_stock=3)

        assert kept
        assert all(2 <= p.stock <= 3 for p in kept)
        assert len(kept) == sum(1 for p in records if 2 <= p.stock <= 3)

    def test_zero_max_stock(self, records: list[Product]) -> None:
        """A maximum of zero keeps out-of-stock products only."""
        kept = filter_stock(records, max_stock=0)

        assert kept
        assert all(p.stock == 0 for p in kept)

    def test_no_bounds_keeps_everything(self, records: list[Product]) -> None:
        """Without bounds nothing is dropped."""
        assert filter_stock(records) == records


class TestSortProducts:
    """Tests for sort_products."""

    def test_price_ascending(self, records: list[Product]) -> None:
        """Prices come out non-decreasing."""
        shuffled = records[::2] + records[1::2]
        ordered = sort_products(shuffled, SortSpec(order_by=OrderBy.PRICE))

        prices = [p.price for p in ordered]
        assert prices == sorted(prices)

    def test_stock_descending(self, records: list[Product]) -> None:
        """DESC reverses the order."""
        ordered = sort_products(
            records, SortSpec(order_by=OrderBy.STOCK, direction=OrderDirection.DESC)
        )

        stocks = [p.stock for p in ordered]
        assert stocks == sorted(stocks, reverse=True)

    def test_name_ignores_case(self, make_product: Callable[..., Product]) -> None:
        """Name ordering is case-insensitive."""
        products = [
            make_product(sku="1", product_name="banana"),
            make_product(sku="2", product_name="Apple"),
            make_product(sku="3", product_name="cherry"),
        ]

        ordered = sort_products(products, SortSpec(order_by=OrderBy.NAME))

        assert [p.product_name for p in ordered] == ["Apple", "banana", "cherry"]

    def test_no_order_keeps_input(self, records: list[Product]) -> None:
        """No sort field keeps the given order."""
        reversed_records = list(reversed(records))

        assert sort_products(reversed_records, SortSpec()) == reversed_records


class TestCursor:
    """Tests for cursor encoding."""

    def test_decode_reads_encoded_values(self) -> None:
        """A cursor carries the last sku and next page."""
        cursor = encode_cursor("SKU-09", 2)

        assert "=" not in cursor
        assert decode_cursor(cursor) == ("SKU-09", 2)

    @pytest.mark.parametrize(
        "cursor",
        [
            "not base64 at all!",
            base64.urlsafe_b64encode(b"not json").decode(),
            base64.urlsafe_b64encode(b'{"page": 2}').decode(),
            base64.urlsafe_b64encode(b'{"last": "A", "page": 0}').decode(),
            base64.urlsafe_b64encode(b'{"last": 3, "page": 2}').decode(),
            base64.urlsafe_b64encode(b"[1, 2]").decode(),
        ],
    )
    def test_malformed_cursor_rejected(self, cursor: str) -> None:
        """Malformed cursors raise InvalidCursorError."""
        with pytest.raises(InvalidCursorError):
            decode_cursor(cursor)


class TestPaginate:
    """Tests for paginate and finalize."""

    def test_page_two_of_three(self, records: list[Product]) -> None:
        """Page 2 of 25 at size 10 returns records 11-20 and a cursor."""
        result = paginate(records, PageSpec(page=2, page_size=10))

        assert [p.sku for p in result.products] == [f"SKU-{i:02d}" for i in range(10, 20)]
        assert result.cursor is not None
        assert result.total == 25
        assert decode_cursor(result.cursor) == ("SKU-19", 3)

    def test_last_page_has_no_cursor(self, records: list[Product]) -> None:
        """The final page carries no cursor."""
        result = paginate(records, PageSpec(page=3, page_size=10))

        assert [p.sku for p in result.products] == [f"SKU-{i:02d}" for i in range(20, 25)]
        assert result.cursor is None
        assert not result.has_more

    def test_exact_fit_has_no_cursor(self, records: list[Product]) -> None:
        """A page ending on the last record carries no cursor."""
        result = paginate(records[:20], PageSpec(page=2, page_size=10))

        assert len(result.products) == 10
        assert result.cursor is None

    def test_page_past_end_is_empty(self, records: list[Product]) -> None:
        """A page beyond the result is empty without a cursor."""
        result = paginate(records, PageSpec(page=9, page_size=10))

        assert result.products == []
        assert result.cursor is None

    def test_pages_cover_results_once(self, records: list[Product]) -> None:
        """Walking every page visits each record exactly once."""
        ordered = sort_products(
            records, SortSpec(order_by=OrderBy.PRICE, direction=OrderDirection.DESC)
        )
        seen: list[str] = []
        page = 1
        while True:
            result = finalize(
                ordered,
                SortSpec(order_by=OrderBy.PRICE, direction=OrderDirection.DESC),
                PageSpec(page=page, page_size=7),
            )
            seen.extend(p.sku for p in result.products)
            if result.cursor is None:
                break
            _, page = decode_cursor(result.cursor)

        assert seen == [p.sku for p in ordered]
