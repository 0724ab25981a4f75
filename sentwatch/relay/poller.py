"""
Mail poller: lists recent sent messages and yields a RelayEvent for each one
not yet in the processed set.

The sequence is lazy - each message is fetched only when the pipeline asks for
the next event - so a failure halfway through leaves later messages for the
next tick. Provider errors propagate to the caller.
"""

from __future__ import annotations

from collections.abc import Iterator

from sentwatch.config import GMAIL_PAGE_SIZE
from sentwatch.gmail.client import GmailSentClient
from sentwatch.gmail.parser import parse_sent_message_strict
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter
from sentwatch.storage.models import RelayEvent
from sentwatch.storage.processed import ProcessedSetStore

logger = get_logger(__name__)


class MailPoller:
    def __init__(
        self,
        client: GmailSentClient,
        processed: ProcessedSetStore,
        page_size: int = GMAIL_PAGE_SIZE,
    ) -> None:
        self.client = client
        self.processed = processed
        self.page_size = page_size

    def poll_once(self) -> Iterator[RelayEvent]:
        """
        Yield events for unseen sent messages, in provider order.

        Yields nothing (and logs) when Gmail credentials are not configured.

        Raises:
            HttpError / GmailParsingError / any client error, on iteration
        """
        if not self.client.is_configured:
            logger.warning("Gmail credentials not configured; skipping poll")
            counter("poll.skipped_unconfigured")
            return

        message_ids = self.client.list_sent_ids(max_results=self.page_size)
        for message_id in message_ids:
            if self.processed.contains(message_id):
                continue
            message = self.client.get_message(message_id)
            counter("poll.candidates")
            yield parse_sent_message_strict(message)
