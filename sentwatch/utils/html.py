"""HTML-to-text conversion for email bodies.

Messages written in rich-text composers or sent from templates often carry
only a text/html part. The relay needs readable text for a short excerpt, so
the markup is parsed and every entity (named or numeric) decoded.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

_BLANK_RUNS = re.compile(r"\n{3,}")


def html_to_text(html: str | None) -> str:
    """Convert an HTML email body to plain text.

    Args:
        html: Raw HTML string from the email body.

    Returns:
        Text with script/style/head removed, one line per block, non-breaking
        spaces turned into plain spaces and at most one blank line in a row.
    """
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()

    text = soup.get_text(separator="\n").replace("\xa0", " ")
    lines = [line.strip() for line in text.splitlines()]
    return _BLANK_RUNS.sub("\n\n", "\n".join(lines)).strip()
