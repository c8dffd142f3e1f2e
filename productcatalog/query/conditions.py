"""Store-agnostic index query descriptions.

The planner emits ``QuerySpec`` values; storage clients translate the
``KeyCondition`` into their own query language.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class KeyOperator(str, Enum):
    """Comparison applied to an index sort key."""

    EQ = "eq"
    BETWEEN = "between"
    GTE = "gte"
    LTE = "lte"


@dataclass(frozen=True)
class SortKeyCondition:
    """Condition on the sort key of an index.

    Attributes:
        attribute: Sort key attribute name.
        operator: Comparison operator.
        values: One value, or two for ``BETWEEN`` (inclusive low, high).
    """

    attribute: str
    operator: KeyOperator
    values: tuple[str | Decimal, ...]

    def __post_init__(self) -> None:
        expected = 2 if self.operator is KeyOperator.BETWEEN else 1
        if len(self.values) != expected:
            raise ValueError(
                f"{self.operator.value} expects {expected} value(s), got {len(self.values)}"
            )

    def matches(self, value: Any) -> bool:
        """Evaluate the condition against a stored sort key value."""
        if value is None:
            return False
        if self.operator is KeyOperator.EQ:
            return value == self.values[0]
        if self.operator is KeyOperator.BETWEEN:
            low, high = self.values
            return low <= value <= high
        if self.operator is KeyOperator.GTE:
            return value >= self.values[0]
        return value <= self.values[0]


@dataclass(frozen=True)
class KeyCondition:
    """Key condition of one index query: partition equality plus an
    optional sort key condition."""

    partition_attr: str
    partition_value: str
    sort: SortKeyCondition | None = None

    def describe(self) -> dict[str, Any]:
        """Loggable representation."""
        described: dict[str, Any] = {self.partition_attr: self.partition_value}
        if self.sort is not None:
            described[self.sort.attribute] = {
                self.sort.operator.value: [str(v) for v in self.sort.values]
            }
        return described


@dataclass(frozen=True)
class QuerySpec:
    """One planned secondary index query."""

    index_name: str
    key_condition: KeyCondition
