"""Tests for the storage backends."""

import json
import tempfile
from pathlib import Path

import pytest

from claimreg.auth.origin import Caller
from claimreg.config import load_settings
from claimreg.events import CollectingSink
from claimreg.registry import (
    AlreadyExists,
    BlockCounter,
    ClaimRegistry,
    Entry,
    JsonFileStorage,
    MemoryStorage,
    NotOwner,
)
from claimreg.runtime import build_runtime


def test_memory_storage_crud():
    storage = MemoryStorage()
    entry = Entry(key=b"k", owner="1", sequence=3)

    assert not storage.contains(b"k")
    storage.put(entry)
    assert storage.contains(b"k")
    assert storage.get(b"k") == entry
    assert list(storage.items()) == [entry]
    assert len(storage) == 1

    storage.delete(b"k")
    assert storage.get(b"k") is None
    assert len(storage) == 0


def test_json_storage_persists_across_instances():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "claims.json"
        storage = JsonFileStorage(path)
        storage.put(Entry(key=b"\x00\xffbinary", owner="1", sequence=7))
        storage.put(Entry(key=b"plain", owner="2", sequence=8))

        reopened = JsonFileStorage(path)
        assert len(reopened) == 2
        assert reopened.get(b"\x00\xffbinary") == Entry(b"\x00\xffbinary", "1", 7)
        assert reopened.contains(b"plain")


def test_json_storage_accepts_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = JsonFileStorage(Path(tmpdir) / "data")
        storage.put(Entry(key=b"k", owner="1", sequence=1))
        assert (Path(tmpdir) / "data" / "claims.json").exists()


def test_json_storage_keys_are_hex_encoded():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "claims.json"
        JsonFileStorage(path).put(Entry(key=b"AB", owner="1", sequence=2))

        data = json.loads(path.read_text())
        assert data == {"4142": {"key": "4142", "owner": "1", "sequence": 2}}


def test_json_storage_delete():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "claims.json"
        storage = JsonFileStorage(path)
        storage.put(Entry(key=b"k", owner="1", sequence=1))
        storage.delete(b"k")
        storage.delete(b"never-there")

        assert JsonFileStorage(path).get(b"k") is None


def test_failed_write_leaves_registry_untouched(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        storage = JsonFileStorage(Path(tmpdir) / "claims.json")
        sink = CollectingSink()
        reg = ClaimRegistry(sequence_source=BlockCounter(), sink=sink, storage=storage)

        def fail(index):
            raise OSError("disk full")

        monkeypatch.setattr(storage, "_save_index", fail)

        with pytest.raises(OSError):
            reg.create(Caller("1"), b"A")

        assert b"A" not in reg
        assert sink.events == []


def test_registry_reloads_claims_from_disk():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "claims.json"
        first = ClaimRegistry(sequence_source=BlockCounter(9), storage=JsonFileStorage(path))
        first.create(Caller("1"), b"A")

        second = ClaimRegistry(sequence_source=BlockCounter(10), storage=JsonFileStorage(path))
        assert second.read(Caller("1"), b"A") == Entry(b"A", "1", 9)


def test_runtimes_sharing_a_home_see_each_others_writes():
    with tempfile.TemporaryDirectory() as tmpdir:
        settings = load_settings(home=tmpdir, env={})
        server = build_runtime(settings)
        cli = build_runtime(settings)

        cli.registry.create(Caller("1"), b"A")
        cli.blocks.advance(5)

        assert server.blocks.current() == 5
        with pytest.raises(AlreadyExists):
            server.registry.create(Caller("2"), b"A")
        with pytest.raises(NotOwner):
            server.registry.update(Caller("2"), b"A")

        server.registry.create(Caller("2"), b"B")
        assert server.registry.get(b"B").sequence == 5
        assert cli.registry.get(b"A") == Entry(b"A", "1", 0)
        assert {e.key for e in cli.registry.entries()} == {b"A", b"B"}

        cli.registry.remove(Caller("1"), b"A")
        assert server.registry.create(Caller("2"), b"A").owner == "2"


def test_failed_emit_reverts_file_backed_remove():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "claims.json"
        armed = []

        def sink(event):
            if armed:
                raise OSError("event log unavailable")

        reg = ClaimRegistry(sequence_source=BlockCounter(), sink=sink, storage=JsonFileStorage(path))
        reg.create(Caller("1"), b"A")
        armed.append(True)

        with pytest.raises(OSError):
            reg.remove(Caller("1"), b"A")

        assert JsonFileStorage(path).get(b"A") == Entry(b"A", "1", 0)
