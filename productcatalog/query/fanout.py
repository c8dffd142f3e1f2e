"""Fan-out/fan-in over asyncio tasks.

``settle_all`` runs awaitables concurrently and hands back one outcome per
awaitable once every one of them has finished. Callers decide what a
failure means; nothing here retries or cancels siblings.
"""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one task: either a value or the exception it raised."""

    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        """Whether the task completed without raising."""
        return self.error is None


async def settle_all(awaitables: Iterable[Awaitable[T]]) -> list[Settled[T]]:
    """Run awaitables concurrently and collect a result-or-error for each.

    Results keep the input order. ``CancelledError`` and other
    ``BaseException`` subclasses are re-raised rather than recorded, so
    cancellation of the caller still propagates.

    Args:
        awaitables: Coroutines or futures to run.

    Returns:
        One ``Settled`` per awaitable, in input order.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    if not tasks:
        return []

    results = await asyncio.gather(*tasks, return_exceptions=True)

    settled: list[Settled[T]] = []
    for result in results:
        if isinstance(result, Exception):
            settled.append(Settled(error=result))
        elif isinstance(result, BaseException):
            raise result
        else:
            settled.append(Settled(value=result))
    return settled
