"""
In-process telemetry for feedbackq.

Events and timings go to the ``feedbackq.telemetry`` logger. Counters live in
a module-level dict so the CLI and tests can read them back; nothing is
shipped to an external metrics backend.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("feedbackq.telemetry")

_COUNTERS: dict[str, int] = {}


def log_event(event_name: str, **fields: Any) -> None:
    """
    Emit one structured event line. Never pass credentials or full feedback text.

    Side Effects:
        - Writes to logger (info level)
    """
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """
    Add ``increment`` to the named counter and return the new total.

    Side Effects:
        - Modifies _COUNTERS (in-memory state)
    """
    total = _COUNTERS.get(name, 0) + increment
    _COUNTERS[name] = total
    logger.debug("counter=%s value=%s", name, total)
    return total


def get_counter(name: str) -> int:
    return _COUNTERS.get(name, 0)


def reset_counters() -> None:
    """Drop every counter (tests reset between cases)."""
    _COUNTERS.clear()


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """
    Log how long the wrapped block took, in milliseconds, even when it raises.

    Side Effects:
        - Writes to logger (debug level)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("timing=%s ms=%.3f", metric_name, elapsed_ms)
