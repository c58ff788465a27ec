"""The claim registry — owner-gated create/read/update/remove of title claims.

Every operation takes an already-authenticated :class:`~claimreg.auth.Caller`
and a byte-string key. Checks run in a fixed order: existence first, then
ownership, so a non-owner asking about an unclaimed title sees ``NotFound``.

All four operations hold one lock from the first check until the event has
been handed to the sink; file-backed storage adds a lock shared with other
processes on the same data directory. An operation either applies its change
and emits exactly one event, or raises and leaves the map untouched. A sink
that raises causes the change to be reverted before the error propagates.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Union

from claimreg.auth.origin import Caller
from claimreg.events import ClaimEvent, EventSink
from claimreg.registry.errors import AlreadyExists, NotFound, NotOwner
from claimreg.registry.models import Entry
from claimreg.registry.storage import JsonFileStorage, MemoryStorage

logger = logging.getLogger(__name__)

Storage = Union[MemoryStorage, JsonFileStorage]
SequenceSource = Callable[[], int]


def _discard(event: ClaimEvent) -> None:
    pass


class ClaimRegistry:
    """Registry of title claims.

    Parameters
    ----------
    sequence_source:
        Zero-argument callable returning the current block number.
    sink:
        Callable receiving one :class:`ClaimEvent` per accepted operation.
        Defaults to discarding events.
    storage:
        Backend holding the entries. Defaults to :class:`MemoryStorage`.
    """

    def __init__(
        self,
        sequence_source: SequenceSource,
        sink: Optional[EventSink] = None,
        storage: Optional[Storage] = None,
    ) -> None:
        self._sequence_source = sequence_source
        self._sink = sink or _discard
        self._storage = storage if storage is not None else MemoryStorage()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create(self, caller: Caller, key: bytes) -> Entry:
        """Claim ``key`` for ``caller`` at the current block.

        Raises :class:`AlreadyExists` if the key is already claimed.
        """
        key = _as_key(key)
        with self._exclusive():
            if self._storage.contains(key):
                raise AlreadyExists(key)
            entry = Entry(key=key, owner=caller.account_id, sequence=self._sequence_source())
            self._storage.put(entry)
            self._emit(
                ClaimEvent.created(caller.account_id, key),
                undo=lambda: self._storage.delete(key),
            )
        logger.debug("Claim %r created by %s at block %d", key, caller, entry.sequence)
        return entry

    def read(self, caller: Caller, key: bytes) -> Entry:
        """Return the entry for ``key`` if ``caller`` owns it."""
        key = _as_key(key)
        with self._exclusive():
            entry = self._owned_entry(caller, key)
            self._emit(ClaimEvent.read(caller.account_id))
        logger.debug("Claim %r read by %s", key, caller)
        return entry

    def update(self, caller: Caller, key: bytes) -> Entry:
        """Re-stamp ``key`` with the current block.

        The owner is written back as ``caller``, who has just been checked to
        be the owner, so ownership never changes hands here.
        """
        key = _as_key(key)
        with self._exclusive():
            previous = self._owned_entry(caller, key)
            entry = Entry(key=key, owner=caller.account_id, sequence=self._sequence_source())
            self._storage.put(entry)
            self._emit(
                ClaimEvent.updated(caller.account_id, key),
                undo=lambda: self._storage.put(previous),
            )
        logger.debug("Claim %r updated by %s at block %d", key, caller, entry.sequence)
        return entry

    def remove(self, caller: Caller, key: bytes) -> Entry:
        """Delete the claim on ``key`` and return the entry as it was."""
        key = _as_key(key)
        with self._exclusive():
            entry = self._owned_entry(caller, key)
            self._storage.delete(key)
            self._emit(
                ClaimEvent.removed(caller.account_id, key),
                undo=lambda: self._storage.put(entry),
            )
        logger.debug("Claim %r removed by %s", key, caller)
        return entry

    # ------------------------------------------------------------------
    # Inspection (not owner-gated, emits nothing)
    # ------------------------------------------------------------------

    def get(self, key: bytes) -> Optional[Entry]:
        key = _as_key(key)
        with self._exclusive():
            return self._storage.get(key)

    def contains(self, key: bytes) -> bool:
        key = _as_key(key)
        with self._exclusive():
            return self._storage.contains(key)

    def entries(self) -> list[Entry]:
        with self._exclusive():
            return list(self._storage.items())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (bytes, bytearray)):
            return False
        return self.contains(key)

    def __len__(self) -> int:
        with self._exclusive():
            return len(self._storage)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries())


    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _owned_entry(self, caller: Caller, key: bytes) -> Entry:
        entry = self._storage.get(key)
        if entry is None:
            raise NotFound(key)
        if entry.owner != caller.account_id:
            raise NotOwner(key, caller.account_id)
        return entry

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock, self._storage.transaction():
            yield

    def _emit(self, event: ClaimEvent, undo: Optional[Callable[[], None]] = None) -> None:
        """Hand ``event`` to the sink; if the sink raises, run ``undo`` and re-raise."""
        try:
            self._sink(event)
        except Exception:
            if undo is not None:
                undo()
            raise


def _as_key(key: bytes) -> bytes:
    if isinstance(key, bytearray):
        return bytes(key)
    if not isinstance(key, bytes):
        raise TypeError(f"Claim keys are bytes, got {type(key).__name__}")
    return key
