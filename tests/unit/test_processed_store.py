"""
Tests for ProcessedSetStore.

Tests cover:
- load from missing, valid, corrupt and wrong-shape files
- add/contains and dirty tracking
- flush writes a JSON array and replaces prior content
- a failed flush keeps the previous file and the in-memory ids
"""

from __future__ import annotations

import json
import os

from sentwatch.observability.telemetry import get_counter
from sentwatch.storage import StorePersistenceError
from sentwatch.storage.processed import ProcessedSetStore


def test_load_missing_file_is_empty(tmp_path):
    store = ProcessedSetStore(tmp_path / "processed_emails.json")
    assert store.load() == set()
    assert len(store) == 0


def test_load_existing_ids(tmp_path):
    path = tmp_path / "processed_emails.json"
    path.write_text(json.dumps(["a1", "b2"]))

    store = ProcessedSetStore(path)
    assert store.load() == {"a1", "b2"}
    assert "a1" in store
    assert store.contains("b2")
    assert not store.dirty


def test_load_corrupt_file_is_empty(tmp_path):
    path = tmp_path / "processed_emails.json"
    path.write_text("[not json")

    store = ProcessedSetStore(path)
    assert store.load() == set()


def test_load_wrong_shape_is_empty(tmp_path):
    path = tmp_path / "processed_emails.json"
    path.write_text(json.dumps({"a1": True}))

    assert ProcessedSetStore(path).load() == set()


def test_add_marks_dirty_once(processed_store):
    processed_store.add("m1")
    assert processed_store.dirty
    assert processed_store.flush()
    assert not processed_store.dirty

    processed_store.add("m1")
    assert not processed_store.dirty


def test_flush_persists_full_set(tmp_path):
    path = tmp_path / "processed_emails.json"
    path.write_text(json.dumps(["old"]))
    store = ProcessedSetStore(path)
    store.load()

    store.add("new")
    assert store.flush()

    assert sorted(json.loads(path.read_text())) == ["new", "old"]
    reloaded = ProcessedSetStore(path)
    assert reloaded.load() == {"new", "old"}


def test_flush_leaves_no_temp_files(processed_store, tmp_path):
    processed_store.add("m1")
    processed_store.flush()

    assert sorted(os.listdir(tmp_path)) == ["processed_emails.json"]


def test_failed_flush_keeps_old_file_and_memory(tmp_path, monkeypatch):
    path = tmp_path / "processed_emails.json"
    path.write_text(json.dumps(["old"]))
    store = ProcessedSetStore(path)
    store.load()
    store.add("new")

    def _fail(*args, **kwargs):
        raise StorePersistenceError("disk full")

    monkeypatch.setattr(store, "write_json", _fail)

    assert store.flush() is False
    assert store.dirty
    assert "new" in store
    assert json.loads(path.read_text()) == ["old"]
    assert get_counter("processed.flush_failed") == 1


def test_flush_into_missing_directory(tmp_path):
    store = ProcessedSetStore(tmp_path / "data" / "processed_emails.json")
    store.add("m1")

    assert store.flush()
    assert (tmp_path / "data" / "processed_emails.json").exists()


def test_flush_if_dirty_skips_clean_store(processed_store):
    assert processed_store.flush_if_dirty()
    assert not processed_store.path.exists()
