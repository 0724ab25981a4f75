"""Authenticated Gmail API client for sent mail (read-only)

Wraps the two calls the poller needs - list recent sent message ids and fetch
one message in full - around a lazily built Gmail service. Saving new
credentials calls `reconfigure()`, which drops the cached service so the next
call rebuilds it.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from googleapiclient.errors import HttpError

from sentwatch.config import GMAIL_PAGE_SIZE, GMAIL_SENT_QUERY, GMAIL_SLOW_CALL_SECONDS
from sentwatch.gmail.oauth import MailProviderNotConfiguredError, build_gmail_service
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event, time_block
from sentwatch.storage.models import GmailCredentials
from sentwatch.utils.redaction import redact

logger = get_logger(__name__)


class GmailSentClient:
    """
    Gmail API client scoped to the authenticated user's sent messages.

    Errors from the API are logged and re-raised; the poller decides what a
    failure means for the current pass.
    """

    def __init__(
        self,
        credentials: GmailCredentials,
        service_factory: Callable[[GmailCredentials], Any] = build_gmail_service,
    ):
        """
        Args:
            credentials: Current Gmail OAuth credentials (may be unconfigured)
            service_factory: Builds the Gmail service; swapped out in tests
        """
        self._credentials = credentials
        self._service_factory = service_factory
        self._service: Any = None

    @property
    def is_configured(self) -> bool:
        return self._credentials.is_configured

    @property
    def service(self) -> Any:
        """
        Get or build the authenticated Gmail API service

        Raises:
            MailProviderNotConfiguredError: If credentials are incomplete
        """
        if not self.is_configured:
            raise MailProviderNotConfiguredError("Gmail credentials are not configured")
        if self._service is None:
            self._service = self._service_factory(self._credentials)
        return self._service

    def reconfigure(self, credentials: GmailCredentials) -> None:
        """Swap in new credentials; the service is rebuilt on next use."""
        self._credentials = credentials
        self._service = None
        logger.info("Gmail client reconfigured (configured=%s)", credentials.is_configured)
        log_event("gmail.reconfigured", configured=credentials.is_configured)

    def list_sent_ids(self, max_results: int = GMAIL_PAGE_SIZE) -> list[str]:
        """
        List ids of the most recent sent messages (provider order, newest first)

        Raises:
            HttpError: If Gmail API call fails
            MailProviderNotConfiguredError: If credentials are incomplete
        """
        try:
            with time_block("gmail.list_sent.latency", slow_after=GMAIL_SLOW_CALL_SECONDS):
                response = (
                    self.service.users()
                    .messages()
                    .list(userId="me", q=GMAIL_SENT_QUERY, maxResults=max_results)
                    .execute()
                )
        except HttpError as e:
            logger.error("Gmail API error listing sent messages: %s", e)
            log_event("gmail.list_sent.error", status=e.resp.status)
            raise

        message_ids = [msg["id"] for msg in response.get("messages", []) or []]
        counter("gmail.messages.listed", len(message_ids))
        return message_ids

    def get_message(self, message_id: str) -> dict[str, Any]:
        """
        Fetch a single message with full payload

        Raises:
            HttpError: If Gmail API call fails
        """
        try:
            with time_block("gmail.get_message.latency", slow_after=GMAIL_SLOW_CALL_SECONDS):
                return (
                    self.service.users()
                    .messages()
                    .get(userId="me", id=message_id, format="full")
                    .execute()
                )
        except HttpError as e:
            logger.error("Gmail API error fetching message: %s", e)
            log_event(
                "gmail.get_message.error",
                status=e.resp.status,
                message_id_hash=redact(message_id),
            )
            raise
