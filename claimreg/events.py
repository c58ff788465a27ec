"""Claim events and the sinks that receive them.

The registry emits one :class:`ClaimEvent` per accepted operation to a sink,
which is any callable taking the event. Provided sinks:

- :class:`CollectingSink` keeps events in memory, in emission order.
- :class:`AuditLogSink` appends events as newline-delimited JSON to daily
  files under a log directory, and can read them back.
- :func:`fan_out` combines several sinks into one.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    created = "created"
    read = "read"
    updated = "updated"
    removed = "removed"


@dataclass(frozen=True)
class ClaimEvent:
    """Notification that a registry operation was accepted.

    ``key`` is ``None`` for read events, which only name the caller.
    """

    kind: EventKind
    caller: str
    key: Optional[bytes] = None

    @classmethod
    def created(cls, caller: str, key: bytes) -> ClaimEvent:
        return cls(EventKind.created, caller, key)

    @classmethod
    def read(cls, caller: str) -> ClaimEvent:
        return cls(EventKind.read, caller)

    @classmethod
    def updated(cls, caller: str, key: bytes) -> ClaimEvent:
        return cls(EventKind.updated, caller, key)

    @classmethod
    def removed(cls, caller: str, key: bytes) -> ClaimEvent:
        return cls(EventKind.removed, caller, key)


EventSink = Callable[[ClaimEvent], None]


class CollectingSink:
    """Keeps every event it receives."""

    def __init__(self) -> None:
        self.events: list[ClaimEvent] = []

    def __call__(self, event: ClaimEvent) -> None:
        self.events.append(event)

    def clear(self) -> None:
        self.events.clear()

    def __len__(self) -> int:
        return len(self.events)


def fan_out(*sinks: EventSink) -> EventSink:
    """Return a sink that forwards each event to ``sinks`` in order."""

    def _deliver(event: ClaimEvent) -> None:
        for sink in sinks:
            sink(event)

    return _deliver


@dataclass
class AuditRecord:
    """An event as stored in the audit log."""

    id: str
    timestamp: str
    kind: str
    caller: str
    key: Optional[str] = None  # hex

    def to_event(self) -> ClaimEvent:
        key = bytes.fromhex(self.key) if self.key is not None else None
        return ClaimEvent(EventKind(self.kind), self.caller, key)


class AuditLogSink:
    """File-based JSON event log.

    Events are persisted as newline-delimited JSON in daily log files named
    ``YYYY-MM-DD.jsonl``.
    """

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _log_file_for_date(self, dt: datetime) -> Path:
        return self._base_dir / f"{dt.strftime('%Y-%m-%d')}.jsonl"

    def _read_all_records(self) -> list[AuditRecord]:
        """Read every record from all log files, oldest first."""
        records: list[AuditRecord] = []
        for path in sorted(self._base_dir.glob("*.jsonl")):
            for line in path.read_text(encoding="utf-8").splitlines():
                if not line.strip():
                    continue
                try:
                    records.append(AuditRecord(**json.loads(line)))
                except (json.JSONDecodeError, TypeError):
                    logger.warning("Skipping malformed audit line in %s", path)
        return records

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def __call__(self, event: ClaimEvent) -> None:
        self.record(event)

    def record(self, event: ClaimEvent) -> AuditRecord:
        """Append ``event`` to today's log file and return the stored record."""
        now = datetime.now(timezone.utc)
        record = AuditRecord(
            id=uuid.uuid4().hex[:16],
            timestamp=now.isoformat(),
            kind=event.kind.value,
            caller=event.caller,
            key=event.key.hex() if event.key is not None else None,
        )
        with self._log_file_for_date(now).open("a", encoding="utf-8") as fh:
            fh.write(json.dumps(asdict(record)) + "\n")
        return record

    def get_events(
        self,
        *,
        caller: Optional[str] = None,
        kind: Optional[EventKind | str] = None,
        limit: int = 200,
    ) -> list[AuditRecord]:
        """Return filtered audit records, newest first."""
        records = self._read_all_records()

        if caller:
            records = [r for r in records if r.caller == caller]
        if kind:
            kind_value = kind.value if isinstance(kind, EventKind) else kind
            records = [r for r in records if r.kind == kind_value]

        records.reverse()
        return records[:limit]
