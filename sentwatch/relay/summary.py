"""
Summary generator: turns a sent email's subject and body into a short chat
notification.

One of several fixed phrasings is picked at random for each email.
"""

from __future__ import annotations

import random
import re

from sentwatch.config import SUMMARY_EXCERPT_CHARS

# Each template embeds the quoted subject and the body excerpt followed by "..."
SUMMARY_TEMPLATES: tuple[str, ...] = (
    'Just sent you an email about "{subject}". Quick summary: {excerpt}...',
    'Hey! Email sent regarding "{subject}". Brief overview: {excerpt}...',
    'Email update: "{subject}" - Here\'s the gist: {excerpt}...',
    'Sent you something about "{subject}". In short: {excerpt}...',
    'FYI: Email titled "{subject}" sent to your inbox. It covers: {excerpt}...',
    'Quick note: Just emailed you about "{subject}". Main points: {excerpt}...',
)

_WHITESPACE = re.compile(r"\s+")


def body_excerpt(body: str | None, limit: int = SUMMARY_EXCERPT_CHARS) -> str:
    """Collapse whitespace runs to single spaces, trim, and cut to `limit` chars."""
    if not body:
        return ""
    return _WHITESPACE.sub(" ", body).strip()[:limit]


def summarize(subject: str | None, body: str | None, rng: random.Random | None = None) -> str:
    """
    Build the notification text for one sent email.

    Args:
        subject: Subject header (may be empty)
        body: Plain-text body (may be empty)
        rng: Random source for template choice; module-level random when None

    Returns:
        One of SUMMARY_TEMPLATES filled in. Never raises.
    """
    template = (rng or random).choice(SUMMARY_TEMPLATES)
    return template.format(subject=subject or "", excerpt=body_excerpt(body))
