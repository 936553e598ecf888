"""
Settle-all fan-out over a thread pool.

Every submitted call runs to completion and reports its own outcome; one
failure never cancels or hides its siblings.
"""

from __future__ import annotations

import concurrent.futures
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Settled(Generic[T]):
    """Outcome of one call: either a value or the exception it raised."""

    value: T | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def settle_all(calls: Sequence[Callable[[], T]], max_workers: int) -> list[Settled[T]]:
    """
    Run all calls concurrently and collect every outcome.

    Returns one Settled per call, in submission order.
    """
    if not calls:
        return []

    results: list[Settled[T] | None] = [None] * len(calls)
    workers = max(1, min(max_workers, len(calls)))

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_idx = {executor.submit(call): idx for idx, call in enumerate(calls)}

        for future in concurrent.futures.as_completed(future_to_idx):
            idx = future_to_idx[future]
            try:
                results[idx] = Settled(value=future.result())
            except Exception as exc:
                results[idx] = Settled(error=exc)

    return results  # type: ignore[return-value]
