"""Storage backends for the claim map.

Two backends share one small interface (``transaction``, ``get``, ``put``,
``delete``, ``contains``, ``items``, ``len``):

- :class:`MemoryStorage` keeps entries in a dict.
- :class:`JsonFileStorage` keeps a JSON index on disk, keyed by the hex form
  of each claim key, rewritten after every mutation.

Every access goes through ``transaction()``. For the JSON backend this holds
an exclusive lock on ``<index>.lock`` and re-reads the index, so several
processes (the API server and the CLI, say) can share one data directory.
Threads within a process are serialised by
:class:`~claimreg.registry.claim_registry.ClaimRegistry`.
"""

from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from claimreg.registry.locking import file_lock
from claimreg.registry.models import Entry

logger = logging.getLogger(__name__)


class MemoryStorage:
    """Dict-backed storage. Contents vanish with the process."""

    def __init__(self) -> None:
        self._entries: dict[bytes, Entry] = {}

    @contextmanager
    def transaction(self) -> Iterator[None]:
        yield

    def get(self, key: bytes) -> Optional[Entry]:
        return self._entries.get(key)

    def contains(self, key: bytes) -> bool:
        return key in self._entries

    def put(self, entry: Entry) -> None:
        self._entries[entry.key] = entry

    def delete(self, key: bytes) -> None:
        self._entries.pop(key, None)

    def items(self) -> Iterator[Entry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


class JsonFileStorage:
    """File-based storage backed by a single JSON index."""

    INDEX_FILE = "claims.json"

    def __init__(self, path: str | Path):
        path = Path(path)
        if path.is_dir() or not path.suffix:
            path = path / self.INDEX_FILE
        self.index_path = path
        self.lock_path = path.with_suffix(path.suffix + ".lock")
        self.index_path.parent.mkdir(parents=True, exist_ok=True)
        self._index: dict[str, dict] = self._load_index()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Lock the index against other processes and reload it from disk."""
        with file_lock(self.lock_path):
            self._index = self._load_index()
            yield

    def get(self, key: bytes) -> Optional[Entry]:
        data = self._index.get(key.hex())
        return _dict_to_entry(data) if data else None

    def contains(self, key: bytes) -> bool:
        return key.hex() in self._index

    def put(self, entry: Entry) -> None:
        index = dict(self._index)
        index[entry.key_hex] = _entry_to_dict(entry)
        self._commit(index)

    def delete(self, key: bytes) -> None:
        if key.hex() not in self._index:
            return
        index = dict(self._index)
        del index[key.hex()]
        self._commit(index)

    def items(self) -> Iterator[Entry]:
        return iter([_dict_to_entry(d) for d in self._index.values()])

    def __len__(self) -> int:
        return len(self._index)

    def _commit(self, index: dict[str, dict]) -> None:
        # Only swap the in-memory view once the file is on disk
        self._save_index(index)
        self._index = index

    def _load_index(self) -> dict[str, dict]:
        if self.index_path.exists():
            with open(self.index_path) as f:
                data = json.load(f)
            logger.debug("Loaded %d claims from %s", len(data), self.index_path)
            return data
        return {}

    def _save_index(self, index: dict[str, dict]) -> None:
        tmp_path = self.index_path.with_suffix(self.index_path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(index, f, indent=2)
        os.replace(tmp_path, self.index_path)


def _entry_to_dict(entry: Entry) -> dict:
    return {
        "key": entry.key_hex,
        "owner": entry.owner,
        "sequence": entry.sequence,
    }


def _dict_to_entry(data: dict) -> Entry:
    return Entry(
        key=bytes.fromhex(data["key"]),
        owner=data["owner"],
        sequence=int(data.get("sequence", 0)),
    )
