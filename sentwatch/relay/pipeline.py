"""
Relay pipeline: sent email -> recipient lookup -> summary -> WhatsApp.

For each new RelayEvent:
  1. extract addresses from the raw To header
  2. build one summary for the event
  3. resolve each address through the contact directory (unmapped: skipped)
  4. dispatch to every resolved number; one failure does not stop the rest
  5. mark the message id processed, whatever the delivery outcome

Step 5 makes the relay at-most-once per message id: a transient channel error
loses that notification instead of re-sending it to every other recipient on
the next tick.

Messages and recipients are handled strictly in sequence on the caller's
event loop.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from sentwatch.messaging import MessagingChannel
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.relay.poller import MailPoller
from sentwatch.relay.summary import summarize
from sentwatch.storage.contacts import ContactDirectory
from sentwatch.storage.models import RelayEvent
from sentwatch.storage.processed import ProcessedSetStore
from sentwatch.utils.email import extract_email_addresses, normalize_email
from sentwatch.utils.redaction import mask_phone, redact, redact_subject

logger = get_logger(__name__)


@dataclass
class RelayOutcome:
    """Per-event delivery tally."""

    message_id: str
    dispatched: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class RelayPipeline:
    def __init__(
        self,
        poller: MailPoller,
        contacts: ContactDirectory,
        processed: ProcessedSetStore,
        channel: MessagingChannel,
        summarizer: Callable[[str, str], str] = summarize,
    ) -> None:
        self.poller = poller
        self.contacts = contacts
        self.processed = processed
        self.channel = channel
        self.summarizer = summarizer

    async def relay(self, event: RelayEvent) -> RelayOutcome:
        """
        Relay one event to every mapped recipient and mark it processed.

        Never raises for recipient-level problems; the outcome records them.

        Side Effects:
            - Sends WhatsApp messages through the channel
            - Adds event.message_id to the processed set
        """
        outcome = RelayOutcome(message_id=event.message_id)
        logger.info(
            "Processing email: %s sent to %s",
            redact_subject(event.subject),
            redact(event.recipients),
        )

        addresses = extract_email_addresses(event.recipients)
        summary = self.summarizer(event.subject, event.body)

        seen: set[str] = set()
        for address in addresses:
            email = normalize_email(address)
            if email in seen:
                continue
            seen.add(email)

            phone = self.contacts.resolve(email)
            if not phone:
                outcome.skipped.append(email)
                continue

            logger.info("Sending WhatsApp to %s for email to %s", mask_phone(phone), email)
            try:
                await self.channel.send(phone, summary)
            except Exception as e:
                logger.error("Error sending WhatsApp to %s: %s", mask_phone(phone), e)
                counter("relay.recipient_failed")
                log_event(
                    "relay.recipient_failed",
                    message_id_hash=redact(event.message_id),
                    email_hash=redact(email),
                    error=type(e).__name__,
                )
                outcome.failed.append(email)
                continue

            logger.info("WhatsApp sent successfully to %s", mask_phone(phone))
            counter("relay.dispatched")
            outcome.dispatched.append(email)

        self.processed.add(event.message_id)
        counter("relay.events")
        log_event(
            "relay.processed",
            message_id_hash=redact(event.message_id),
            dispatched=len(outcome.dispatched),
            failed=len(outcome.failed),
            skipped=len(outcome.skipped),
        )
        return outcome

    async def run_pass(self) -> int:
        """
        Poll once and relay every new sent message.

        Returns:
            Number of messages relayed (marked processed) in this pass.

        A provider error aborts the rest of the pass; it is logged, not
        raised, and the next scheduled tick starts over. When anything was
        relayed the processed set is flushed before returning.
        """
        relayed = 0
        try:
            for event in self.poller.poll_once():
                if self.processed.contains(event.message_id):
                    continue
                await self.relay(event)
                relayed += 1
        except Exception as e:
            logger.error("Error checking emails: %s", e)
            counter("poll.pass_failed")
            log_event("poll.pass_failed", error=type(e).__name__, relayed=relayed)

        if relayed:
            logger.info("Processed %d new sent emails", relayed)
            self.processed.flush()
        return relayed
