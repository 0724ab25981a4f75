"""Centralized configuration for the SentWatch relay.

Re-exports everything from sentwatch.infrastructure.settings so existing imports
continue to work, then adds typed constants for the stores, the Gmail poller,
the WhatsApp channel and the summary generator.  Environment variable overrides
use safe defaults so the app starts without extra env configuration.
"""

from __future__ import annotations

import os

from sentwatch.infrastructure.settings import *  # noqa: F401, F403
from sentwatch.infrastructure.settings import DATA_DIR

# --- App ---
APP_VERSION: str = "1.0.0"
SERVICE_NAME: str = "SentWatch Relay"

# --- Stores ---
CREDENTIALS_FILE = DATA_DIR / "credentials.json"
CONTACTS_FILE = DATA_DIR / "contacts.json"
PROCESSED_FILE = DATA_DIR / "processed_emails.json"

# --- Scheduling ---
POLL_INTERVAL_SECONDS: float = float(os.getenv("SENTWATCH_POLL_INTERVAL", "30"))
FLUSH_INTERVAL_SECONDS: float = float(os.getenv("SENTWATCH_FLUSH_INTERVAL", "300"))

# --- Gmail ---
GMAIL_PAGE_SIZE: int = int(os.getenv("SENTWATCH_GMAIL_PAGE_SIZE", "10"))
GMAIL_SENT_QUERY: str = "in:sent"
# Gmail calls run on the event loop; slower calls are logged as warnings
GMAIL_SLOW_CALL_SECONDS: float = float(os.getenv("SENTWATCH_GMAIL_SLOW_CALL", "5"))
GMAIL_TOKEN_URI: str = "https://oauth2.googleapis.com/token"

# Fallback credentials used until a credentials record is saved
GMAIL_CLIENT_ID: str = os.getenv("GMAIL_CLIENT_ID", "")
GMAIL_CLIENT_SECRET: str = os.getenv("GMAIL_CLIENT_SECRET", "")
GMAIL_REFRESH_TOKEN: str = os.getenv("GMAIL_REFRESH_TOKEN", "")

# --- WhatsApp ---
WHATSAPP_API_TOKEN: str = os.getenv("WHATSAPP_API_TOKEN", "")
WHATSAPP_PHONE_NUMBER_ID: str = os.getenv("WHATSAPP_PHONE_NUMBER_ID", "")
WHATSAPP_API_BASE_URL: str = os.getenv("WHATSAPP_API_BASE_URL", "https://graph.facebook.com/v21.0")
WHATSAPP_TIMEOUT_SECONDS: float = float(os.getenv("WHATSAPP_TIMEOUT", "10"))
WHATSAPP_MAX_TEXT_CHARS: int = 4096
# Delay between connect attempts after the channel fails
WHATSAPP_RECONNECT_SECONDS: float = float(os.getenv("WHATSAPP_RECONNECT_INTERVAL", "30"))

# --- Summary ---
SUMMARY_EXCERPT_CHARS: int = 100
