"""
Redaction helpers for telemetry: hash addresses, ids and phone numbers so log
events can be correlated without carrying the raw value.
"""

from __future__ import annotations

from hashlib import sha256


def redact(value: str | None) -> str:
    """
    Hash an address, Gmail message id or URL for a log line.

    The same input always gives the same `hash:<12 hex>` token. Empty input
    gives `hash:missing`.
    """
    if not value:
        return "hash:missing"
    digest = sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"hash:{digest}"


def redact_subject(subject: str | None, max_length: int = 30) -> str:
    """
    Shorten a sent email's subject for logs and tag it with a short hash.

    Subjects longer than `max_length` are cut and end in "...". The hash
    covers the full subject.

    Example:
        "Invoice #2024-118 for October consulting" ->
        "Invoice #2024-118 for October ... (h:3f9a1c)"
    """
    if not subject:
        return "(no subject)"

    visible = f"{subject[:max_length]}..." if len(subject) > max_length else subject
    digest = sha256(subject.encode("utf-8")).hexdigest()[:6]
    return f"{visible} (h:{digest})"


def mask_phone(phone: str | None) -> str:
    """Keep the last four digits of a destination number."""
    if not phone:
        return "(none)"
    if len(phone) <= 4:
        return "*" * len(phone)
    return "*" * (len(phone) - 4) + phone[-4:]
