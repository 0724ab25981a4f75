"""
RelayContext: the single owner of the relay's long-lived state.

Built once at startup from the persisted records, handed to the API routes and
the scheduler, and closed at shutdown (final processed-set flush).
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import dataclass, field
from pathlib import Path

from sentwatch import config
from sentwatch.gmail.client import GmailSentClient
from sentwatch.messaging import MessagingChannel, SessionState
from sentwatch.messaging.whatsapp import WhatsAppChannel
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.relay.pipeline import RelayPipeline
from sentwatch.relay.poller import MailPoller
from sentwatch.relay.scheduler import RelayScheduler
from sentwatch.storage.contacts import ContactDirectory
from sentwatch.storage.credentials import CredentialStore
from sentwatch.storage.models import GmailCredentials
from sentwatch.storage.processed import ProcessedSetStore

logger = get_logger(__name__)


@dataclass
class RelayContext:
    credentials: CredentialStore
    contacts: ContactDirectory
    processed: ProcessedSetStore
    gmail: GmailSentClient
    channel: MessagingChannel
    pipeline: RelayPipeline
    scheduler: RelayScheduler
    reconnect_interval: float = config.WHATSAPP_RECONNECT_SECONDS
    _reconnect_task: asyncio.Task | None = field(default=None, init=False, repr=False)

    @classmethod
    def build(
        cls,
        credentials: CredentialStore,
        contacts: ContactDirectory,
        processed: ProcessedSetStore,
        channel: MessagingChannel,
        gmail: GmailSentClient | None = None,
    ) -> RelayContext:
        """Wire the stores, Gmail client and channel into a pipeline and scheduler."""
        processed.load()
        gmail = gmail or GmailSentClient(credentials.load())
        poller = MailPoller(gmail, processed)
        pipeline = RelayPipeline(poller, contacts, processed, channel)
        scheduler = RelayScheduler(pipeline, processed)
        return cls(
            credentials=credentials,
            contacts=contacts,
            processed=processed,
            gmail=gmail,
            channel=channel,
            pipeline=pipeline,
            scheduler=scheduler,
        )

    @classmethod
    def from_settings(cls, data_dir: Path | None = None) -> RelayContext:
        """Build from sentwatch.config (files under DATA_DIR, WhatsApp from env)."""
        if data_dir is None:
            credentials_path = config.CREDENTIALS_FILE
            contacts_path = config.CONTACTS_FILE
            processed_path = config.PROCESSED_FILE
        else:
            credentials_path = data_dir / config.CREDENTIALS_FILE.name
            contacts_path = data_dir / config.CONTACTS_FILE.name
            processed_path = data_dir / config.PROCESSED_FILE.name

        return cls.build(
            credentials=CredentialStore(credentials_path),
            contacts=ContactDirectory(contacts_path),
            processed=ProcessedSetStore(processed_path),
            channel=WhatsAppChannel(),
        )

    def update_credentials(self, creds: GmailCredentials) -> bool:
        """
        Persist new Gmail credentials and point the client at them.

        Returns:
            False if the record could not be saved (client left unchanged)
        """
        if not self.credentials.save(creds):
            return False
        self.gmail.reconfigure(creds)
        return True

    async def start(self) -> None:
        """
        Connect the messaging channel; start monitoring once it is ready.

        A channel that fails to connect (network error, rejected profile call)
        is retried every `reconnect_interval` seconds in the background. An
        unconfigured channel is not retried.
        """
        await self.channel.connect()
        if self.channel.is_ready:
            await self.scheduler.start()
            return

        state = self.channel.session.state
        logger.warning("Messaging channel is %s; email monitoring not started", state.value)
        if state is SessionState.FAILED:
            self._reconnect_task = asyncio.create_task(self._reconnect_until_ready())

    async def _reconnect_until_ready(self) -> None:
        attempt = 0
        while not self.channel.is_ready:
            await asyncio.sleep(self.reconnect_interval)
            attempt += 1
            counter("messaging.reconnect_attempts")
            state = await self.channel.connect()
            if state is SessionState.UNAUTHENTICATED:
                logger.warning("Messaging channel no longer configured; reconnect stopped")
                return
            if state is not SessionState.READY:
                logger.info("Messaging reconnect attempt %d: %s", attempt, state.value)

        log_event("messaging.reconnected", attempts=attempt)
        await self.scheduler.start()

    async def close(self) -> None:
        """Cancel any pending reconnect, stop timers, flush the processed set, close the channel."""
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._reconnect_task
            self._reconnect_task = None
        await self.scheduler.stop()
        self.processed.flush_if_dirty()
        await self.channel.close()
