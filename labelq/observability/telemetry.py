"""
Smart label instrumentation.

Matching, label application and backfill report through here:

    counter("smart_labels.apply_success")
    log_event("smart_labels.backfill.complete", total_labels_applied=12)
    with time_block("smart_labels.ai_call.latency"): ...

Nothing leaves the process. Events are log lines, and counters and latency
samples live in module state so tests can read them back. Label application
fans out over a thread pool, so all state changes go through `_lock`.
"""

from __future__ import annotations

import contextlib
import logging
import threading
import time
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("labelq.telemetry")

_lock = threading.Lock()
_counts: dict[str, int] = {}
_samples: dict[str, list[float]] = {}


def _metric_key(name: str) -> str:
    # "x.latency" and "x.latency_ms" are the same series
    return f"{name}_ms" if name.endswith(".latency") else name


def log_event(event_name: str, **fields: Any) -> None:
    """Emit one `event=<name> {fields}` info line. Fields must already be redacted."""
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """Add `increment` to a named count and return the new total."""
    with _lock:
        total = _counts.get(name, 0) + increment
        _counts[name] = total
    logger.debug("counter=%s value=%s", name, total)
    return total


def get_counter(name: str) -> int:
    with _lock:
        return _counts.get(name, 0)


def reset_counters() -> None:
    with _lock:
        _counts.clear()


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """Record the wall time of the block under `metric_name`, even if it raises."""
    key = _metric_key(metric_name)
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        with _lock:
            _samples.setdefault(key, []).append(elapsed)
        logger.debug("timing=%s seconds=%.6f", key, elapsed)


def get_latency_stats(metric_name: str) -> dict[str, float]:
    """Count, min, max, avg, p50 and p95 for a timed series (zeros when empty)."""
    with _lock:
        ordered = sorted(_samples.get(_metric_key(metric_name), []))
    if not ordered:
        return {"count": 0, "min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p95": 0.0}

    n = len(ordered)
    return {
        "count": n,
        "min": ordered[0],
        "max": ordered[-1],
        "avg": sum(ordered) / n,
        "p50": ordered[n // 2],
        "p95": ordered[min(int(n * 0.95), n - 1)],
    }


def reset_latencies() -> None:
    with _lock:
        _samples.clear()
