"""
Periodic drivers for the relay, run as asyncio tasks on the API's event loop.

Two timers:
- poll: one immediate pass on start, then every POLL_INTERVAL_SECONDS
- flush: processed-set flush every FLUSH_INTERVAL_SECONDS

Both share the single event loop with the HTTP handlers, so a slow Gmail call
delays requests and the other timer. No tick overlaps itself.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable

from sentwatch.config import FLUSH_INTERVAL_SECONDS, POLL_INTERVAL_SECONDS
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.relay.pipeline import RelayPipeline
from sentwatch.storage.processed import ProcessedSetStore

logger = get_logger(__name__)


class RelayScheduler:
    def __init__(
        self,
        pipeline: RelayPipeline,
        processed: ProcessedSetStore,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        flush_interval: float = FLUSH_INTERVAL_SECONDS,
    ) -> None:
        self.pipeline = pipeline
        self.processed = processed
        self.poll_interval = poll_interval
        self.flush_interval = flush_interval
        self._tasks: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        """
        Run one poll pass now, then schedule the poll and flush timers.

        Calling start() while already running is a no-op.
        """
        if self.running:
            return

        logger.info("Starting email monitoring...")
        log_event(
            "scheduler.started",
            poll_interval=self.poll_interval,
            flush_interval=self.flush_interval,
        )
        await self._poll_tick()

        self._tasks = [
            asyncio.create_task(
                self._every(self.poll_interval, self._poll_tick), name="sentwatch-poll"
            ),
            asyncio.create_task(
                self._every(self.flush_interval, self._flush_tick), name="sentwatch-flush"
            ),
        ]

    async def stop(self) -> None:
        """Cancel both timers and wait for them to finish."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if tasks:
            log_event("scheduler.stopped")

    async def _every(self, interval: float, tick: Callable[[], Awaitable[None]]) -> None:
        while True:
            await asyncio.sleep(interval)
            await tick()

    async def _poll_tick(self) -> None:
        try:
            await self.pipeline.run_pass()
        except Exception as e:
            # a failing tick must not end the timer task
            logger.exception("Unexpected error in poll tick: %s", e)
            counter("scheduler.poll_tick_failed")

    async def _flush_tick(self) -> None:
        if not self.processed.flush():
            counter("scheduler.flush_tick_failed")
