"""
Tests for RelayPipeline.

Tests cover:
- one sent email to a mapped contact produces exactly one dispatch
- fan-out to several recipients, unmapped ones skipped
- a failing recipient does not stop the others and the email is still marked
- a second pass over the same mailbox dispatches nothing
- provider errors abort the pass without raising
- the processed set is flushed after a pass that relayed something
"""

from __future__ import annotations

import json

import pytest

from sentwatch.observability.telemetry import get_counter
from sentwatch.relay.pipeline import RelayPipeline
from sentwatch.relay.poller import MailPoller
from sentwatch.storage.models import RelayEvent
from tests.fakes import FakeChannel, FakeGmailClient, gmail_message


def _fixed_summary(subject: str, body: str) -> str:
    return f"{subject}: {body[:20]}"


def _pipeline(gmail, contacts, processed, channel, summarizer=_fixed_summary):
    return RelayPipeline(MailPoller(gmail, processed), contacts, processed, channel, summarizer)


@pytest.mark.asyncio
async def test_single_recipient_dispatch(contact_directory, processed_store, fake_channel):
    contact_directory.upsert("client@firm.com", "15551234567")
    gmail = FakeGmailClient([gmail_message("m1")])
    pipeline = _pipeline(
        gmail,
        contact_directory,
        processed_store,
        fake_channel,
        summarizer=lambda subject, body: f"summary of {subject}",
    )

    relayed = await pipeline.run_pass()

    assert relayed == 1
    assert fake_channel.sent == [("15551234567", "summary of Invoice")]
    assert "m1" in processed_store


@pytest.mark.asyncio
async def test_real_summary_mentions_subject(contact_directory, processed_store, fake_channel):
    contact_directory.upsert("client@firm.com", "15551234567")
    pipeline = RelayPipeline(
        MailPoller(FakeGmailClient([gmail_message("m1")]), processed_store),
        contact_directory,
        processed_store,
        fake_channel,
    )

    await pipeline.run_pass()

    [(destination, text)] = fake_channel.sent
    assert destination == "15551234567"
    assert '"Invoice"' in text
    assert "Attached is the invoice for October." in text


@pytest.mark.asyncio
async def test_fan_out_and_skip_unmapped(contact_directory, processed_store, fake_channel):
    contact_directory.upsert("a@x.com", "111")
    contact_directory.upsert("b@y.com", "222")
    event = RelayEvent(
        message_id="m1",
        subject="Plan",
        recipients="Alice <A@x.com>, b@y.com, stranger@z.com, a@x.com",
        body="Agenda",
    )
    pipeline = _pipeline(FakeGmailClient(), contact_directory, processed_store, fake_channel)

    outcome = await pipeline.relay(event)

    assert fake_channel.sent == [("111", "Plan: Agenda"), ("222", "Plan: Agenda")]
    assert outcome.dispatched == ["a@x.com", "b@y.com"]
    assert outcome.skipped == ["stranger@z.com"]
    assert outcome.failed == []


@pytest.mark.asyncio
async def test_no_recipients_still_marked(contact_directory, processed_store, fake_channel):
    event = RelayEvent(message_id="m1", subject="Draft", recipients="", body="")
    pipeline = _pipeline(FakeGmailClient(), contact_directory, processed_store, fake_channel)

    outcome = await pipeline.relay(event)

    assert fake_channel.sent == []
    assert outcome.dispatched == []
    assert "m1" in processed_store


@pytest.mark.asyncio
async def test_failed_recipient_does_not_block_others(contact_directory, processed_store):
    contact_directory.upsert("a@x.com", "111")
    contact_directory.upsert("b@y.com", "222")
    channel = FakeChannel(fail_for={"111"})
    gmail = FakeGmailClient([gmail_message("m1", to="a@x.com, b@y.com")])
    pipeline = _pipeline(gmail, contact_directory, processed_store, channel)

    assert await pipeline.run_pass() == 1

    assert [destination for destination, _ in channel.sent] == ["222"]
    assert "m1" in processed_store
    assert get_counter("relay.recipient_failed") == 1


@pytest.mark.asyncio
async def test_channel_not_ready_still_marks(contact_directory, processed_store):
    contact_directory.upsert("client@firm.com", "15551234567")
    channel = FakeChannel(ready=False)
    pipeline = _pipeline(
        FakeGmailClient([gmail_message("m1")]), contact_directory, processed_store, channel
    )

    await pipeline.run_pass()

    assert channel.sent == []
    assert "m1" in processed_store


@pytest.mark.asyncio
async def test_second_pass_dispatches_nothing(contact_directory, processed_store, fake_channel):
    contact_directory.upsert("client@firm.com", "15551234567")
    gmail = FakeGmailClient([gmail_message("m1"), gmail_message("m2")])
    pipeline = _pipeline(gmail, contact_directory, processed_store, fake_channel)

    assert await pipeline.run_pass() == 2
    assert await pipeline.run_pass() == 0

    assert len(fake_channel.sent) == 2
    assert gmail.fetched == ["m1", "m2"]


@pytest.mark.asyncio
async def test_list_error_aborts_pass_without_raising(
    contact_directory, processed_store, fake_channel
):
    gmail = FakeGmailClient([gmail_message("m1")])
    gmail.list_error = RuntimeError("network down")
    pipeline = _pipeline(gmail, contact_directory, processed_store, fake_channel)

    assert await pipeline.run_pass() == 0
    assert get_counter("poll.pass_failed") == 1
    assert len(processed_store) == 0


@pytest.mark.asyncio
async def test_fetch_error_keeps_earlier_progress(contact_directory, processed_store, fake_channel):
    contact_directory.upsert("client@firm.com", "15551234567")
    gmail = FakeGmailClient([gmail_message("m1"), gmail_message("m2"), gmail_message("m3")])
    gmail.get_errors["m2"] = RuntimeError("quota")
    pipeline = _pipeline(gmail, contact_directory, processed_store, fake_channel)

    assert await pipeline.run_pass() == 1
    assert "m1" in processed_store
    assert "m2" not in processed_store
    assert "m3" not in processed_store

    # next tick retries the rest
    del gmail.get_errors["m2"]
    assert await pipeline.run_pass() == 2
    assert len(fake_channel.sent) == 3


@pytest.mark.asyncio
async def test_pass_flushes_processed_set(contact_directory, processed_store, fake_channel):
    gmail = FakeGmailClient([gmail_message("m1")])
    pipeline = _pipeline(gmail, contact_directory, processed_store, fake_channel)

    await pipeline.run_pass()

    assert json.loads(processed_store.path.read_text()) == ["m1"]
    assert not processed_store.dirty


@pytest.mark.asyncio
async def test_empty_pass_does_not_write(contact_directory, processed_store, fake_channel):
    pipeline = _pipeline(FakeGmailClient(), contact_directory, processed_store, fake_channel)

    assert await pipeline.run_pass() == 0
    assert not processed_store.path.exists()


@pytest.mark.asyncio
async def test_unconfigured_gmail_is_a_quiet_pass(
    contact_directory, processed_store, fake_channel
):
    gmail = FakeGmailClient([gmail_message("m1")], configured=False)
    pipeline = _pipeline(gmail, contact_directory, processed_store, fake_channel)

    assert await pipeline.run_pass() == 0
    assert get_counter("poll.pass_failed") == 0
