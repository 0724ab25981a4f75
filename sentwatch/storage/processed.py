"""
Processed-set store: the durable set of Gmail message ids already relayed.

The set is the relay's idempotency key. It is loaded once at startup, grows
additively in memory, and is flushed to disk periodically (and after any poll
pass that relayed something). Ids are never removed.
"""

from __future__ import annotations

import os

from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.storage import JsonFileStore, StorePersistenceError

logger = get_logger(__name__)


class ProcessedSetStore(JsonFileStore):
    """
    In-memory set of processed message ids backed by a JSON array file.

    Flush failures are non-fatal: unflushed ids stay in memory and the next
    flush retries the full write.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        super().__init__(path)
        self._ids: set[str] = set()
        self._dirty = False

    def load(self) -> set[str]:
        """
        Load ids from disk, replacing the in-memory set.

        Returns an empty set when there is no prior state or it cannot be read.
        """
        data = self.read_json(default=[])
        if not isinstance(data, list):
            logger.error("Processed-set file %s is not a JSON array; starting empty", self.path)
            data = []

        self._ids = {str(message_id) for message_id in data if message_id}
        self._dirty = False
        logger.info("Loaded %d previously processed emails", len(self._ids))
        log_event("processed.loaded", count=len(self._ids))
        return set(self._ids)

    def contains(self, message_id: str) -> bool:
        return message_id in self._ids

    __contains__ = contains

    def add(self, message_id: str) -> None:
        if message_id not in self._ids:
            self._ids.add(message_id)
            self._dirty = True

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def dirty(self) -> bool:
        """True when ids were added since the last successful flush."""
        return self._dirty

    def flush(self) -> bool:
        """
        Persist the full set, overwriting prior content.

        Returns:
            True if written, False if the write failed (already logged)

        Side Effects:
            - Rewrites the processed-set file atomically
            - Increments processed.flushed / processed.flush_failed counters
        """
        try:
            self.write_json(sorted(self._ids), indent=None)
        except StorePersistenceError as e:
            logger.error("Error saving processed emails: %s", e)
            counter("processed.flush_failed")
            return False

        self._dirty = False
        counter("processed.flushed")
        logger.debug("Flushed %d processed ids to %s", len(self._ids), self.path)
        return True

    def flush_if_dirty(self) -> bool:
        """Flush only when something changed; returns True when nothing was pending."""
        if not self._dirty:
            return True
        return self.flush()
