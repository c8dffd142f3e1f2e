"""Result merger."""

from collections.abc import Iterable


def merge(skus: Iterable[str]) -> set[str]:
    """Deduplicate identifiers from every index query.

    No ordering is kept; order is imposed after hydration.
    """
    return set(skus)
