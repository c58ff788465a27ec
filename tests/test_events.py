"""Tests for claim events and sinks."""

import json
import tempfile
from pathlib import Path

from claimreg.auth.origin import Caller
from claimreg.events import AuditLogSink, ClaimEvent, CollectingSink, EventKind, fan_out
from claimreg.registry import BlockCounter, ClaimRegistry


def test_collecting_sink_keeps_order():
    sink = CollectingSink()
    sink(ClaimEvent.created("1", b"A"))
    sink(ClaimEvent.read("1"))
    assert [e.kind for e in sink.events] == [EventKind.created, EventKind.read]
    assert len(sink) == 2
    sink.clear()
    assert sink.events == []


def test_fan_out_delivers_to_every_sink():
    a, b = CollectingSink(), CollectingSink()
    sink = fan_out(a, b)
    event = ClaimEvent.removed("1", b"A")
    sink(event)
    assert a.events == [event]
    assert b.events == [event]


def test_audit_log_round_trip():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogSink(Path(tmpdir) / "audit")
        audit(ClaimEvent.created("1", b"A"))
        audit(ClaimEvent.read("1"))
        audit(ClaimEvent.created("2", b"\xff"))

        records = audit.get_events()
        assert [r.kind for r in records] == ["created", "read", "created"]
        assert [r.caller for r in records] == ["2", "1", "1"]
        assert records[0].caller == "2"
        assert records[0].to_event() == ClaimEvent.created("2", b"\xff")
        assert records[1].to_event() == ClaimEvent.read("1")


def test_audit_log_filters():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogSink(tmpdir)
        audit(ClaimEvent.created("1", b"A"))
        audit(ClaimEvent.updated("1", b"A"))
        audit(ClaimEvent.created("2", b"B"))

        assert len(audit.get_events(caller="1")) == 2
        assert len(audit.get_events(kind=EventKind.created)) == 2
        assert len(audit.get_events(kind="updated")) == 1
        assert len(audit.get_events(limit=1)) == 1


def test_audit_log_skips_malformed_lines():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogSink(tmpdir)
        audit(ClaimEvent.created("1", b"A"))
        log_file = next(Path(tmpdir).glob("*.jsonl"))
        with log_file.open("a") as fh:
            fh.write("not json\n")
            fh.write(json.dumps({"unexpected": True}) + "\n")

        assert len(audit.get_events()) == 1


def test_registry_writes_to_audit_log():
    with tempfile.TemporaryDirectory() as tmpdir:
        audit = AuditLogSink(tmpdir)
        memory = CollectingSink()
        reg = ClaimRegistry(sequence_source=BlockCounter(), sink=fan_out(memory, audit))

        reg.create(Caller("1"), b"A")
        reg.remove(Caller("1"), b"A")

        assert [r.kind for r in audit.get_events()] == ["removed", "created"]
        assert len(memory.events) == 2
