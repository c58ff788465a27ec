"""Sequence sources — the block number recorded on each claim.

The registry only *reads* the current value. Whoever owns the counter (a
test, the CLI's ``block`` command, a ledger) advances it.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from claimreg.registry.locking import file_lock

logger = logging.getLogger(__name__)


class BlockCounter:
    """In-memory monotonic block counter.

    Instances are callable, so one can be passed directly as the registry's
    sequence source.
    """

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("Block number cannot be negative")
        self._value = start

    def current(self) -> int:
        return self._value

    def advance(self, n: int = 1) -> int:
        """Move forward ``n`` blocks and return the new block number."""
        if n < 0:
            raise ValueError("Cannot advance by a negative number of blocks")
        self._store(self._value + n)
        return self._value

    def set(self, value: int) -> int:
        """Jump to ``value``. Going backwards raises ``ValueError``."""
        if value < self._value:
            raise ValueError(
                f"Block number must not decrease (current {self._value}, got {value})"
            )
        self._store(value)
        return self._value

    def _store(self, value: int) -> None:
        self._value = value

    def __call__(self) -> int:
        return self.current()


class FileBlockCounter(BlockCounter):
    """Block counter persisted as ``{"block_number": N}`` in a JSON file.

    The file is the source of truth: ``current()`` re-reads it, and
    ``advance``/``set`` run under a lock on ``<file>.lock``, so counters in
    different processes sharing the file never disagree or step backwards.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.lock_path = self.path.with_suffix(self.path.suffix + ".lock")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(self._load())

    def current(self) -> int:
        self._value = self._load()
        return self._value

    def advance(self, n: int = 1) -> int:
        with file_lock(self.lock_path):
            self._value = self._load()
            return super().advance(n)

    def set(self, value: int) -> int:
        with file_lock(self.lock_path):
            self._value = self._load()
            return super().set(value)

    def _load(self) -> int:
        if not self.path.exists():
            return 0
        data = json.loads(self.path.read_text())
        return int(data.get("block_number", 0))

    def _store(self, value: int) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps({"block_number": value}, indent=2))
        os.replace(tmp_path, self.path)
        super()._store(value)
        logger.debug("Block number is now %d", value)
