"""Registry errors.

The taxonomy is closed: every rejected operation raises exactly one of
:class:`AlreadyExists`, :class:`NotFound` or :class:`NotOwner`.
"""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for rejected registry operations."""

    code = "registry_error"

    def __init__(self, key: bytes, message: str) -> None:
        super().__init__(message)
        self.key = key


class AlreadyExists(RegistryError):
    """The title has already been claimed."""

    code = "already_exists"

    def __init__(self, key: bytes) -> None:
        super().__init__(key, f"Claim {key!r} already exists")


class NotFound(RegistryError):
    """The title has not been claimed."""

    code = "not_found"

    def __init__(self, key: bytes) -> None:
        super().__init__(key, f"No claim for {key!r}")


class NotOwner(RegistryError):
    """The title is claimed by another account."""

    code = "not_owner"

    def __init__(self, key: bytes, caller: str) -> None:
        super().__init__(key, f"Account '{caller}' does not own claim {key!r}")
        self.caller = caller
