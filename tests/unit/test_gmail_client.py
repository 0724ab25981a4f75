"""
Tests for GmailSentClient and OAuth helpers.

The Gmail service is a Mock; no network calls are made.
"""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
from googleapiclient.errors import HttpError

from sentwatch.gmail.client import GmailSentClient
from sentwatch.gmail.oauth import (
    GMAIL_SCOPES,
    MailProviderNotConfiguredError,
    build_gmail_service,
    build_google_credentials,
)
from sentwatch.storage.models import GmailCredentials

CREDS = GmailCredentials(client_id="cid", client_secret="secret", refresh_token="refresh")


def _service_with(list_response=None, message=None):
    service = Mock()
    messages = service.users.return_value.messages.return_value
    messages.list.return_value.execute.return_value = list_response or {}
    messages.get.return_value.execute.return_value = message or {}
    return service, messages


def _http_error(status: int) -> HttpError:
    resp = Mock()
    resp.status = status
    resp.reason = "error"
    return HttpError(resp, b'{"error": {"message": "boom"}}')


def test_list_sent_ids_queries_sent_folder():
    service, messages = _service_with({"messages": [{"id": "a"}, {"id": "b"}]})
    client = GmailSentClient(CREDS, service_factory=lambda c: service)

    assert client.list_sent_ids(max_results=10) == ["a", "b"]
    messages.list.assert_called_once_with(userId="me", q="in:sent", maxResults=10)


def test_list_sent_ids_empty_mailbox():
    service, _ = _service_with({"resultSizeEstimate": 0})
    client = GmailSentClient(CREDS, service_factory=lambda c: service)

    assert client.list_sent_ids() == []


def test_get_message_full_format():
    service, messages = _service_with(message={"id": "a", "payload": {}})
    client = GmailSentClient(CREDS, service_factory=lambda c: service)

    assert client.get_message("a") == {"id": "a", "payload": {}}
    messages.get.assert_called_once_with(userId="me", id="a", format="full")


def test_http_error_is_reraised():
    service, messages = _service_with()
    messages.list.return_value.execute.side_effect = _http_error(500)
    client = GmailSentClient(CREDS, service_factory=lambda c: service)

    with pytest.raises(HttpError):
        client.list_sent_ids()


def test_service_requires_credentials():
    client = GmailSentClient(GmailCredentials(), service_factory=Mock())

    assert not client.is_configured
    with pytest.raises(MailProviderNotConfiguredError):
        client.list_sent_ids()


def test_service_is_built_once_and_rebuilt_after_reconfigure():
    factory = Mock(side_effect=lambda c: _service_with({"messages": []})[0])
    client = GmailSentClient(CREDS, service_factory=factory)

    client.list_sent_ids()
    client.list_sent_ids()
    assert factory.call_count == 1

    new_creds = GmailCredentials(client_id="cid2", client_secret="s2", refresh_token="r2")
    client.reconfigure(new_creds)
    client.list_sent_ids()

    assert factory.call_count == 2
    factory.assert_called_with(new_creds)


def test_build_google_credentials():
    creds = build_google_credentials(CREDS)

    assert creds.refresh_token == "refresh"
    assert creds.client_id == "cid"
    assert creds.client_secret == "secret"
    assert creds.scopes == GMAIL_SCOPES


def test_build_google_credentials_requires_all_values():
    with pytest.raises(MailProviderNotConfiguredError):
        build_google_credentials(GmailCredentials(client_id="cid"))


@patch("sentwatch.gmail.oauth.build")
def test_build_gmail_service(mock_build):
    mock_build.return_value = Mock()

    service = build_gmail_service(CREDS)

    assert service is mock_build.return_value
    args, kwargs = mock_build.call_args
    assert args == ("gmail", "v1")
    assert kwargs["cache_discovery"] is False


@patch("sentwatch.gmail.oauth.build")
def test_build_gmail_service_wraps_errors(mock_build):
    mock_build.side_effect = RuntimeError("discovery failed")

    with pytest.raises(ValueError, match="Failed to build Gmail service"):
        build_gmail_service(CREDS)
