"""
Email address helpers shared by the contact directory and the relay pipeline.
"""

from __future__ import annotations

import re

# Address-like tokens; display names, quotes and separators never match
_ADDRESS_PATTERN = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")


def normalize_email(email_address: str | None) -> str:
    """
    Normalize an email address for use as a directory key.

    Examples:
        >>> normalize_email("  Foo@Bar.com ")
        'foo@bar.com'

        >>> normalize_email(None)
        ''
    """
    if not email_address:
        return ""
    return email_address.strip().lower()


def extract_email_addresses(recipient_field: str | None) -> list[str]:
    """
    Extract every address from a raw To/Cc header value.

    Handles multiple recipients and "Name <user@domain>" forms. Order is kept
    and duplicates are preserved; callers that care dedupe after normalizing.

    Examples:
        >>> extract_email_addresses("Alice <a@x.com>, b@y.com")
        ['a@x.com', 'b@y.com']

        >>> extract_email_addresses("undisclosed-recipients:;")
        []
    """
    if not recipient_field:
        return []
    return _ADDRESS_PATTERN.findall(recipient_field)


def normalize_phone(raw_phone: str | None) -> str:
    """
    Strip everything but digits from a phone number.

    Examples:
        >>> normalize_phone("(555) 123-4567")
        '5551234567'

        >>> normalize_phone("+1 555.123.4567")
        '15551234567'
    """
    if not raw_phone:
        return ""
    return re.sub(r"[^0-9]", "", raw_phone)
