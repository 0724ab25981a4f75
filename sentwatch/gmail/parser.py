"""
Gmail payload parsing: converts a `users.messages.get(format="full")` response
into a `RelayEvent`.

Side-effect free apart from telemetry; parse failures surface as
`GmailParsingError` so the poll pass can abort and retry on the next tick.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from sentwatch.observability.telemetry import counter, log_event
from sentwatch.storage.models import RelayEvent
from sentwatch.utils.html import html_to_text
from sentwatch.utils.redaction import redact

_TEXT_PLAIN = "text/plain"
_TEXT_HTML = "text/html"


class GmailParsingError(ValueError):
    """Raised when a Gmail payload cannot be converted into a RelayEvent."""


def _header_lookup(headers: Iterable[dict[str, str]], name: str) -> str | None:
    name_lower = name.lower()
    for header in headers:
        if header.get("name", "").lower() == name_lower:
            return header.get("value")
    return None


def _decode_base64(data: str) -> str:
    """Decode Gmail's URL-safe base64 payloads (padding optional)."""
    padding = "=" * (-len(data) % 4)
    try:
        decoded = base64.urlsafe_b64decode((data + padding).encode("utf-8"))
        return decoded.decode("utf-8", errors="replace")
    except (binascii.Error, ValueError) as exc:
        raise GmailParsingError("failed to decode message body") from exc


def _part_data(part: dict[str, Any], mime_type: str) -> str | None:
    if part.get("mimeType") != mime_type:
        return None
    return (part.get("body") or {}).get("data") or None


def extract_body(payload: dict[str, Any]) -> str:
    """
    Extract a plain-text body from a message payload.

    Preference order:
      1. first text/plain sub-part with data
      2. first text/html sub-part with data, tags stripped
      3. the payload's own body when it has no sub-parts

    Only the first level of parts is inspected. Returns "" when nothing usable is found.
    """
    parts = payload.get("parts") or []
    if parts:
        for part in parts:
            data = _part_data(part, _TEXT_PLAIN)
            if data:
                return _decode_base64(data)
        for part in parts:
            data = _part_data(part, _TEXT_HTML)
            if data:
                return html_to_text(_decode_base64(data))
        return ""

    data = (payload.get("body") or {}).get("data")
    if not data:
        return ""
    decoded = _decode_base64(data)
    if payload.get("mimeType") == _TEXT_HTML:
        return html_to_text(decoded)
    return decoded


def parse_sent_message(message: dict[str, Any]) -> RelayEvent:
    """
    Convert a Gmail API message into a `RelayEvent`.

    Missing Subject/To headers become empty strings; a message with no To
    header still yields an event (it relays to nobody but is marked processed).
    """
    if not isinstance(message, dict):
        raise GmailParsingError("message must be a dict")

    try:
        message_id = message["id"]
        payload = message["payload"]
    except KeyError as exc:
        raise GmailParsingError(f"missing field: {exc}") from exc

    headers = payload.get("headers") or []
    subject = _header_lookup(headers, "Subject") or ""
    recipients = _header_lookup(headers, "To") or ""
    body = extract_body(payload)

    try:
        event = RelayEvent(
            message_id=message_id,
            subject=subject,
            recipients=recipients,
            body=body,
        )
    except ValidationError as exc:
        counter("gmail.validation_failed")
        log_event(
            "gmail.relay_event.validation_failed",
            errors=exc.errors(),
            message_id_hash=redact(str(message_id)),
        )
        raise GmailParsingError("relay event validation failed") from exc

    counter("gmail.parsed.count")
    return event


def parse_sent_message_strict(message: dict[str, Any]) -> RelayEvent:
    """
    Wrapper that emits observability signals on failure.
    """
    try:
        return parse_sent_message(message)
    except GmailParsingError as exc:
        message_id = message.get("id", "") if isinstance(message, dict) else ""
        log_event(
            "gmail.parse_failed",
            message_id_hash=redact(str(message_id)),
            error=str(exc),
        )
        counter("gmail.parse_failed.count")
        raise
