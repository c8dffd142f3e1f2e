"""Tests for result merging."""

from productcatalog.query.merger import merge


def test_merge_deduplicates() -> None:
    """Identifiers from overlapping queries appear once."""
    assert merge(["A", "B", "A", "C", "B"]) == {"A", "B", "C"}


def test_merge_empty() -> None:
    """Nothing in, nothing out."""
    assert merge([]) == set()
