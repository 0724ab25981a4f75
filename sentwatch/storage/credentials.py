"""Credential store for the Gmail API OAuth client

Keeps {clientId, clientSecret, refreshToken} in a JSON file. Until a record is
saved, the GMAIL_CLIENT_ID / GMAIL_CLIENT_SECRET / GMAIL_REFRESH_TOKEN env vars
are used. Secret values are never returned through the API, only whether all
three are present.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from sentwatch import config
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.storage import JsonFileStore, StorePersistenceError
from sentwatch.storage.models import GmailCredentials

logger = get_logger(__name__)

# Records written by earlier versions used gmail-prefixed keys
_LEGACY_KEYS = {
    "gmailClientId": "clientId",
    "gmailClientSecret": "clientSecret",
    "gmailRefreshToken": "refreshToken",
}


def _from_record(record: dict[str, Any]) -> GmailCredentials:
    normalized = {_LEGACY_KEYS.get(key, key): value for key, value in record.items()}
    return GmailCredentials.model_validate(
        {
            "clientId": str(normalized.get("clientId") or ""),
            "clientSecret": str(normalized.get("clientSecret") or ""),
            "refreshToken": str(normalized.get("refreshToken") or ""),
        }
    )


def credentials_from_env() -> GmailCredentials:
    return GmailCredentials(
        client_id=config.GMAIL_CLIENT_ID,
        client_secret=config.GMAIL_CLIENT_SECRET,
        refresh_token=config.GMAIL_REFRESH_TOKEN,
    )


class CredentialStore(JsonFileStore):
    """Gmail OAuth credentials persisted as a flat JSON record."""

    def load(self) -> GmailCredentials:
        """
        Load credentials, falling back to environment variables.

        Returns:
            GmailCredentials (possibly unconfigured, never None)
        """
        record = self.read_json(default=None)
        if isinstance(record, dict):
            try:
                return _from_record(record)
            except ValidationError as e:
                logger.error("Invalid credentials record in %s: %s", self.path, e)

        return credentials_from_env()

    def save(self, credentials: GmailCredentials) -> bool:
        """
        Persist credentials, replacing any previous record.

        Returns:
            True on success, False if the write failed (already logged)
        """
        try:
            self.write_json(credentials.to_record())
        except StorePersistenceError as e:
            logger.error("Error saving credentials: %s", e)
            counter("credentials.save_failed")
            return False

        counter("credentials.saved")
        log_event("credentials.saved", configured=credentials.is_configured)
        return True

    def is_configured(self) -> bool:
        return self.load().is_configured
