from __future__ import annotations

import random

import pytest

from sentwatch.gmail.parser import (
    GmailParsingError,
    extract_body,
    parse_sent_message,
    parse_sent_message_strict,
)
from sentwatch.observability.telemetry import get_counter
from sentwatch.relay.summary import summarize
from tests.fakes import encode_body, gmail_message


def test_parse_single_part_plain_text():
    event = parse_sent_message(gmail_message("m1"))

    assert event.message_id == "m1"
    assert event.subject == "Invoice"
    assert event.recipients == "client@firm.com"
    assert event.body == "Attached is the invoice for October."


def test_body_without_padding_decodes():
    # 5 bytes -> 8 base64 chars with one "=" stripped
    message = gmail_message("m1", body="hello")
    assert not message["payload"]["body"]["data"].endswith("=")
    assert parse_sent_message(message).body == "hello"


def test_multipart_prefers_plain_text():
    payload = {
        "mimeType": "multipart/alternative",
        "parts": [
            {"mimeType": "text/html", "body": {"data": encode_body("<p>html version</p>")}},
            {"mimeType": "text/plain", "body": {"data": encode_body("plain version")}},
        ],
    }
    assert extract_body(payload) == "plain version"


def test_multipart_html_only_is_stripped():
    payload = {
        "mimeType": "multipart/alternative",
        "parts": [
            {"mimeType": "text/html", "body": {"data": encode_body("<p>Hello <b>there</b></p>")}},
        ],
    }
    assert " ".join(extract_body(payload).split()) == "Hello there"


def test_single_part_html_is_stripped():
    payload = {"mimeType": "text/html", "body": {"data": encode_body("<div>Hi</div>")}}
    assert extract_body(payload).strip() == "Hi"


def test_no_usable_body_is_empty():
    payload = {
        "mimeType": "multipart/mixed",
        "parts": [{"mimeType": "application/pdf", "body": {"attachmentId": "att-1"}}],
    }
    assert extract_body(payload) == ""
    assert extract_body({"mimeType": "text/plain", "body": {"size": 0}}) == ""


def test_missing_headers_become_empty():
    message = gmail_message("m1")
    message["payload"]["headers"] = []

    event = parse_sent_message(message)
    assert event.subject == ""
    assert event.recipients == ""


def test_header_lookup_is_case_insensitive():
    message = gmail_message("m1")
    message["payload"]["headers"] = [
        {"name": "subject", "value": "lower"},
        {"name": "TO", "value": "x@y.com"},
    ]
    event = parse_sent_message(message)
    assert event.subject == "lower"
    assert event.recipients == "x@y.com"


@pytest.mark.parametrize("field", ["id", "payload"])
def test_missing_top_level_fields_raise(field):
    message = gmail_message("m1")
    message.pop(field)
    with pytest.raises(GmailParsingError):
        parse_sent_message(message)


def test_empty_id_raises():
    with pytest.raises(GmailParsingError, match="validation failed"):
        parse_sent_message(gmail_message(""))


def test_strict_counts_failures():
    with pytest.raises(GmailParsingError):
        parse_sent_message_strict({"id": "m1"})
    assert get_counter("gmail.parse_failed.count") == 1


def test_html_entities_do_not_reach_the_summary():
    message = gmail_message("m1")
    message["payload"] = {
        "mimeType": "multipart/alternative",
        "headers": message["payload"]["headers"],
        "parts": [
            {
                "mimeType": "text/html",
                "body": {
                    "data": encode_body("<p>Don&#8217;t forget the caf&eacute; &mdash; agenda</p>")
                },
            }
        ],
    }

    event = parse_sent_message(message)
    text = summarize(event.subject, event.body, rng=random.Random(0))

    assert "Don’t forget the café — agenda..." in text
    assert "&" not in text
