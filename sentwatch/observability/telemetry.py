"""
In-process telemetry helpers.

Nothing is exported to a metrics backend; events go to the log as one line each
and counters live in memory so tests and the health endpoint can read them.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("sentwatch.telemetry")

_COUNTERS: dict[str, int] = {}


def log_event(event_name: str, **fields: Any) -> None:
    """
    Log one relay event as `event=<name> key=value ...`, keys sorted.

    Addresses, message ids and phone numbers must already be passed through
    sentwatch.utils.redaction (e.g. `email_hash=redact(addr)`).
    """
    pairs = " ".join(f"{key}={value}" for key, value in sorted(fields.items()))
    logger.info("event=%s %s", event_name, pairs)


def counter(name: str, increment: int = 1) -> int:
    """Bump a named count (`relay.dispatched`, `poll.pass_failed`, ...) and return the new total."""
    value = _COUNTERS.get(name, 0) + increment
    _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def get_counter(name: str) -> int:
    return _COUNTERS.get(name, 0)


def reset_counters() -> None:
    """Clear all counters (tests)."""
    _COUNTERS.clear()


@contextlib.contextmanager
def time_block(metric_name: str, slow_after: float | None = None) -> Iterator[None]:
    """
    Time a block (Gmail and WhatsApp calls).

    Args:
        metric_name: e.g. "gmail.list_sent.latency"
        slow_after: Seconds after which the timing is logged at WARNING
            and counted as "<metric_name>.slow"
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if slow_after is not None and elapsed > slow_after:
            logger.warning("timing=%s seconds=%.3f (slow)", metric_name, elapsed)
            counter(f"{metric_name}.slow")
        else:
            logger.debug("timing=%s seconds=%.6f", metric_name, elapsed)
