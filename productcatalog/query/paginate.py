"""Post-hydration filtering, sorting and pagination.

The continuation cursor is relative to one snapshot of query results.
Re-running the same filters after concurrent writes can shift which
record sits at a given offset; the cursor does not pin a position in the
store.
"""

import base64
import binascii
import json
import locale
from decimal import Decimal
from typing import Any

from productcatalog.domain.exceptions import InvalidCursorError
from productcatalog.domain.models import (
    OrderDirection,
    PageResult,
    PageSpec,
    Product,
    SortSpec,
)


def filter_stock(
    products: list[Product],
    min_stock: int | None = None,
    max_stock: int | None = None,
) -> list[Product]:
    """Keep products whose stock lies within the inclusive bounds.

    No index covers stock, so this runs on hydrated records.
    """
    if min_stock is None and max_stock is None:
        return products
    return [
        p
        for p in products
        if (min_stock is None or p.stock >= min_stock)
        and (max_stock is None or p.stock <= max_stock)
    ]


def _sort_value(value: Any) -> Any:
    """Sort key for one attribute value.

    Strings use locale collation on the case-folded value; numbers
    compare numerically.
    """
    if isinstance(value, str):
        return (0, locale.strxfrm(value.casefold()), value)
    if isinstance(value, (int, float, Decimal)):
        return (1, value)
    return (2, "")


def sort_products(products: list[Product], sort: SortSpec) -> list[Product]:
    """Order products by the requested field and direction.

    Args:
        products: Hydrated products.
        sort: Sort field and direction; no field keeps the input order.

    Returns:
        New sorted list.
    """
    if sort.order_by is None:
        return list(products)

    attribute = sort.order_by.attribute
    return sorted(
        products,
        key=lambda p: _sort_value(getattr(p, attribute)),
        reverse=sort.direction is OrderDirection.DESC,
    )


def encode_cursor(last_sku: str, next_page: int) -> str:
    """Build an opaque continuation marker.

    Args:
        last_sku: Identifier of the last record on the current page.
        next_page: Page number the marker continues from.

    Returns:
        URL-safe token.
    """
    payload = json.dumps({"last": last_sku, "page": next_page}, separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode_cursor(cursor: str) -> tuple[str, int]:
    """Read a continuation marker.

    Args:
        cursor: Token produced by ``encode_cursor``.

    Returns:
        Tuple of (last sku, next page number).

    Raises:
        InvalidCursorError: If the token is malformed.
    """
    padded = cursor + "=" * (-len(cursor) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        last_sku = payload["last"]
        next_page = int(payload["page"])
    except (binascii.Error, UnicodeError, ValueError, KeyError, TypeError) as e:
        raise InvalidCursorError(cursor) from e

    if not isinstance(last_sku, str) or next_page < 1:
        raise InvalidCursorError(cursor)
    return last_sku, next_page


def paginate(products: list[Product], page: PageSpec) -> PageResult:
    """Slice one page out of an ordered result set.

    Args:
        products: Sorted products.
        page: Page number and size.

    Returns:
        Page with a cursor when records remain past the page.
    """
    start = page.offset
    end = start + page.page_size
    window = products[start:end]

    cursor = None
    if end < len(products):
        cursor = encode_cursor(window[-1].sku, page.page + 1)

    return PageResult(products=window, cursor=cursor, total=len(products))


def finalize(products: list[Product], sort: SortSpec, page: PageSpec) -> PageResult:
    """Sort then paginate hydrated products."""
    return paginate(sort_products(products, sort), page)
