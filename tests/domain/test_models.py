"""Tests for domain models."""

from decimal import Decimal
from typing import Callable

import pytest

from productcatalog.domain.models import (
    KEY_SEPARATOR,
    FilterQuery,
    OrderBy,
    PageResult,
    PageSpec,
    Product,
    to_price,
)


class TestProduct:
    """Tests for Product."""

    def test_price_normalized_to_cents(self, make_product: Callable[..., Product]) -> None:
        """Prices are stored with two decimals."""
        product = make_product(price=19.999)
        assert product.price == Decimal("20.00")

    def test_apply_returns_changed_fields(self, make_product: Callable[..., Product]) -> None:
        """Only fields whose value differs are reported."""
        product = make_product(price=Decimal("10"), stock=5)
        changed = product.apply({"price": Decimal("10.00"), "stock": 6})

        assert changed == {"stock"}
        assert product.stock == 6

    def test_apply_zero_values_are_updates(self, make_product: Callable[..., Product]) -> None:
        """Zero price and stock are applied, not ignored."""
        product = make_product(price=Decimal("10"), stock=5)
        changed = product.apply({"price": 0, "stock": 0})

        assert changed == {"price", "stock"}
        assert product.price == Decimal("0.00")
        assert product.stock == 0

    def test_apply_can_clear_description(self, make_product: Callable[..., Product]) -> None:
        """Description may be set to None."""
        product = make_product(description="something")
        assert product.apply({"description": None}) == {"description"}
        assert product.description is None

    def test_apply_rejects_sku(self, make_product: Callable[..., Product]) -> None:
        """The primary identifier cannot be patched."""
        product = make_product()
        with pytest.raises(KeyError):
            product.apply({"sku": "OTHER"})

    def test_brand_with_key_separator_rejected(
        self, make_product: Callable[..., Product]
    ) -> None:
        """A brand containing the sort key separator cannot be stored."""
        with pytest.raises(ValueError, match="brand"):
            make_product(brand=f"A{KEY_SEPARATOR}1")

    def test_apply_brand_with_key_separator_rejected(
        self, make_product: Callable[..., Product]
    ) -> None:
        """Renaming a brand to include the separator leaves it unchanged."""
        product = make_product(brand="Acme")
        with pytest.raises(ValueError):
            product.apply({"brand": f"Acme{KEY_SEPARATOR}2"})
        assert product.brand == "Acme"


class TestFilterQuery:
    """Tests for FilterQuery."""

    def test_zero_price_is_a_bound(self) -> None:
        """A minimum price of zero still counts as a bound."""
        assert FilterQuery(min_price=Decimal("0")).has_price_bound
        assert not FilterQuery().has_price_bound

    def test_zero_stock_is_a_bound(self) -> None:
        """A maximum stock of zero still counts as a bound."""
        assert FilterQuery(max_stock=0).has_stock_bound

    def test_defaults(self) -> None:
        """Default page is 1 with 20 items."""
        query = FilterQuery()
        assert query.page.page == 1
        assert query.page.page_size == 20
        assert query.sort.order_by is None


class TestPageSpec:
    """Tests for PageSpec."""

    def test_offset(self) -> None:
        """Offset is derived from page and size."""
        assert PageSpec(page=3, page_size=10).offset == 20

    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, 0)])
    def test_rejects_non_positive(self, page: int, page_size: int) -> None:
        """Page and size must be at least 1."""
        with pytest.raises(ValueError):
            PageSpec(page=page, page_size=page_size)


def test_order_by_name_reads_product_name() -> None:
    """The "name" sort field maps to product_name."""
    assert OrderBy.NAME.attribute == "product_name"
    assert OrderBy.PRICE.attribute == "price"


def test_page_result_has_more() -> None:
    """has_more reflects the cursor."""
    assert PageResult(products=[], cursor="x").has_more
    assert not PageResult(products=[]).has_more


def test_to_price_rounds_half_up() -> None:
    """Half cents round up."""
    assert to_price("0.005") == Decimal("0.01")
