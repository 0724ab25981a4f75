"""
Pytest configuration for relay tests

Stores backed by a per-test temporary directory and a ready fake channel.
Fakes live in tests/fakes.py.
"""

from __future__ import annotations

import pytest

from sentwatch.observability.telemetry import reset_counters
from sentwatch.storage.contacts import ContactDirectory
from sentwatch.storage.credentials import CredentialStore
from sentwatch.storage.processed import ProcessedSetStore
from tests.fakes import FakeChannel


@pytest.fixture(autouse=True)
def _clean_counters():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def processed_store(tmp_path) -> ProcessedSetStore:
    store = ProcessedSetStore(tmp_path / "processed_emails.json")
    store.load()
    return store


@pytest.fixture
def contact_directory(tmp_path) -> ContactDirectory:
    return ContactDirectory(tmp_path / "contacts.json")


@pytest.fixture
def credential_store(tmp_path) -> CredentialStore:
    return CredentialStore(tmp_path / "credentials.json")


@pytest.fixture
def fake_channel() -> FakeChannel:
    return FakeChannel()
