"""Index planner.

Maps a filter query to the secondary index queries that cover it. The
store has no multi-attribute query, so each spec targets one index and
the executor unions their results.
"""

from decimal import Decimal

import structlog

from productcatalog.domain.exceptions import ConfigurationError
from productcatalog.domain.keys import (
    BRAND_PRICE_INDEX,
    BRAND_PRICE_KEY,
    CATEGORY_BRAND_PRICE_INDEX,
    CATEGORY_BRAND_PRICE_KEY,
    CATEGORY_PRICE_INDEX,
    CATEGORY_PRICE_PARTITION_ATTR,
    CATEGORY_PRICE_SORT_ATTR,
    MAX_PRICE,
    MIN_PRICE,
    PRODUCT_NAME_INDEX,
    PRODUCT_NAME_KEY,
    brand_price_sort_key,
    encode_price,
)
from productcatalog.domain.models import FilterQuery, to_price
from productcatalog.query.conditions import (
    KeyCondition,
    KeyOperator,
    QuerySpec,
    SortKeyCondition,
)

logger = structlog.get_logger()


def _price_range(
    attribute: str,
    min_price: Decimal | None,
    max_price: Decimal | None,
    encode: bool,
) -> SortKeyCondition:
    """Build a price condition for a sort key holding the price alone."""

    def value(price: Decimal) -> str | Decimal:
        return encode_price(price) if encode else to_price(price)

    if min_price is not None and max_price is not None:
        return SortKeyCondition(
            attribute, KeyOperator.BETWEEN, (value(min_price), value(max_price))
        )
    if min_price is not None:
        return SortKeyCondition(attribute, KeyOperator.GTE, (value(min_price),))
    return SortKeyCondition(attribute, KeyOperator.LTE, (value(max_price),))


def _brand_price_range(
    brand: str,
    min_price: Decimal | None,
    max_price: Decimal | None,
) -> SortKeyCondition:
    """Build a ``<brand>#<price12>`` range.

    The brand prefix pins both ends, so a missing bound is replaced by
    the smallest or largest encodable price rather than an open range.
    """
    low = min_price if min_price is not None else MIN_PRICE
    high = max_price if max_price is not None else MAX_PRICE
    return SortKeyCondition(
        CATEGORY_BRAND_PRICE_KEY.sort_attr,
        KeyOperator.BETWEEN,
        (brand_price_sort_key(brand, low), brand_price_sort_key(brand, high)),
    )


def plan(filters: FilterQuery) -> list[QuerySpec]:
    """Choose the index queries for a filter query.

    The product name branch is independent of the category/brand/price
    chain, so both may fire. Within the chain the first matching branch
    wins.

    Args:
        filters: Filter query to plan.

    Returns:
        Index queries to run concurrently.

    Raises:
        ConfigurationError: If no branch produced a query.
    """
    specs: list[QuerySpec] = []

    if filters.product_name is not None:
        specs.append(
            QuerySpec(
                index_name=PRODUCT_NAME_INDEX,
                key_condition=KeyCondition(
                    partition_attr=PRODUCT_NAME_KEY.partition_attr,
                    partition_value=filters.product_name,
                ),
            )
        )

    category = filters.category
    brand = filters.brand

    if category is not None and brand is not None and filters.has_price_bound:
        specs.append(
            QuerySpec(
                index_name=CATEGORY_BRAND_PRICE_INDEX,
                key_condition=KeyCondition(
                    partition_attr=CATEGORY_BRAND_PRICE_KEY.partition_attr,
                    partition_value=category,
                    sort=_brand_price_range(brand, filters.min_price, filters.max_price),
                ),
            )
        )
    elif category is not None and filters.has_price_bound:
        specs.append(
            QuerySpec(
                index_name=CATEGORY_PRICE_INDEX,
                key_condition=KeyCondition(
                    partition_attr=CATEGORY_PRICE_PARTITION_ATTR,
                    partition_value=category,
                    sort=_price_range(
                        CATEGORY_PRICE_SORT_ATTR,
                        filters.min_price,
                        filters.max_price,
                        encode=False,
                    ),
                ),
            )
        )
    elif brand is not None and filters.has_price_bound:
        specs.append(
            QuerySpec(
                index_name=BRAND_PRICE_INDEX,
                key_condition=KeyCondition(
                    partition_attr=BRAND_PRICE_KEY.partition_attr,
                    partition_value=brand,
                    sort=_price_range(
                        BRAND_PRICE_KEY.sort_attr,
                        filters.min_price,
                        filters.max_price,
                        encode=True,
                    ),
                ),
            )
        )
    elif category is not None and brand is not None:
        specs.append(
            QuerySpec(
                index_name=CATEGORY_BRAND_PRICE_INDEX,
                key_condition=KeyCondition(
                    partition_attr=CATEGORY_BRAND_PRICE_KEY.partition_attr,
                    partition_value=category,
                    sort=_brand_price_range(brand, None, None),
                ),
            )
        )
    elif category is not None:
        specs.append(
            QuerySpec(
                index_name=CATEGORY_PRICE_INDEX,
                key_condition=KeyCondition(
                    partition_attr=CATEGORY_PRICE_PARTITION_ATTR,
                    partition_value=category,
                ),
            )
        )
    elif brand is not None:
        specs.append(
            QuerySpec(
                index_name=BRAND_PRICE_INDEX,
                key_condition=KeyCondition(
                    partition_attr=BRAND_PRICE_KEY.partition_attr,
                    partition_value=brand,
                ),
            )
        )

    if not specs:
        raise ConfigurationError(
            details={
                "accepted": ["productName", "category", "brand"],
            }
        )

    logger.debug(
        "Planned index queries",
        indexes=[spec.index_name for spec in specs],
    )
    return specs
