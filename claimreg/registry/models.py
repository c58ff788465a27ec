"""Registry data models — claim entries and key helpers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Entry:
    """A single claim: who holds ``key`` and at which block it was last written."""

    key: bytes
    owner: str  # Account id of the creator / last updater
    sequence: int  # Block number at creation or last update

    @property
    def key_hex(self) -> str:
        return self.key.hex()

    @property
    def key_text(self) -> str:
        """Best-effort readable form of the key."""
        return display_key(self.key)


def display_key(key: bytes) -> str:
    try:
        return key.decode("utf-8")
    except UnicodeDecodeError:
        return "0x" + key.hex()


def parse_key(raw: str, as_hex: bool = False) -> bytes:
    """Turn user input into a claim key.

    Plain text is UTF-8 encoded. With ``as_hex`` the input is read as hex,
    with or without a ``0x`` prefix.
    """
    if as_hex:
        digits = raw[2:] if raw.lower().startswith("0x") else raw
        return bytes.fromhex(digits)
    return raw.encode("utf-8")
