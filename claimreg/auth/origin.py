"""Dispatch origins and caller tokens.

Signature checking happens upstream. By the time a request reaches this
module, its origin is either *signed* by an account or carries no account at
all (``root`` for privileged system calls, ``none`` for unsigned ones).
Registry operations only accept signed origins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BadOrigin(Exception):
    """Raised when an operation requires a signed origin and got another kind."""


class OriginKind(str, Enum):
    signed = "signed"
    root = "root"
    none = "none"


@dataclass(frozen=True)
class Caller:
    """An already-authenticated account performing a registry operation."""

    account_id: str

    def __post_init__(self) -> None:
        if not self.account_id:
            raise ValueError("Caller account_id must be non-empty")

    def __str__(self) -> str:
        return self.account_id


@dataclass(frozen=True)
class Origin:
    """Where a call came from."""

    kind: OriginKind
    account_id: Optional[str] = None

    @classmethod
    def signed(cls, account_id: str) -> Origin:
        return cls(kind=OriginKind.signed, account_id=str(account_id))

    @classmethod
    def root(cls) -> Origin:
        return cls(kind=OriginKind.root)

    @classmethod
    def none(cls) -> Origin:
        return cls(kind=OriginKind.none)


def ensure_signed(origin: Origin) -> Caller:
    """Return the signing account of ``origin`` as a :class:`Caller`.

    Raises :class:`BadOrigin` for ``root`` and ``none`` origins, and for a
    signed origin missing its account.
    """
    if origin.kind is not OriginKind.signed or not origin.account_id:
        raise BadOrigin(f"Expected a signed origin, got '{origin.kind.value}'")
    return Caller(origin.account_id)
