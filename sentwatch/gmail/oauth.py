"""Gmail OAuth2 credentials and service construction

The relay never runs the consent flow itself: the operator obtains a refresh
token elsewhere and saves it with the client id/secret. From those three values
this module builds google-auth credentials and an authenticated Gmail v1 service.
Access tokens are refreshed by google-auth on demand.
"""

from __future__ import annotations

from typing import Any

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from sentwatch.config import GMAIL_TOKEN_URI
from sentwatch.observability.logging import get_logger
from sentwatch.observability.telemetry import counter, log_event
from sentwatch.storage.models import GmailCredentials

logger = get_logger(__name__)

# Reading sent mail only
GMAIL_SCOPES = [
    "https://www.googleapis.com/auth/gmail.readonly",
]


class MailProviderNotConfiguredError(RuntimeError):
    """Raised when a Gmail call is attempted without complete credentials."""


def build_google_credentials(creds: GmailCredentials) -> Credentials:
    """
    Build refresh-token credentials for the Gmail API

    Raises:
        MailProviderNotConfiguredError: If any of the three values is empty
    """
    if not creds.is_configured:
        raise MailProviderNotConfiguredError("Gmail credentials are not configured")

    return Credentials(
        token=None,
        refresh_token=creds.refresh_token,
        token_uri=GMAIL_TOKEN_URI,
        client_id=creds.client_id,
        client_secret=creds.client_secret,
        scopes=GMAIL_SCOPES,
    )


def build_gmail_service(creds: GmailCredentials) -> Any:
    """
    Build authenticated Gmail API service

    Returns:
        Gmail API service object (googleapiclient.discovery.Resource)

    Raises:
        MailProviderNotConfiguredError: If credentials are incomplete
        ValueError: If service build fails
    """
    credentials = build_google_credentials(creds)

    try:
        service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
    except Exception as e:
        logger.error("Failed to build Gmail service: %s", e)
        raise ValueError(f"Failed to build Gmail service: {e}") from e

    logger.info("Built Gmail API service")
    counter("oauth.service_built.count")
    log_event("oauth.service_built", scopes=GMAIL_SCOPES)
    return service
