"""Registry — the title claim map and its owner-gated operations.

The registry provides:
- Claiming: create a claim on an unclaimed title
- Ownership checks: read, update and remove are open to the owner only
- Notifications: one event per accepted operation, handed to a sink
- Storage: in-memory or JSON-file backed entries
"""

from claimreg.registry.claim_registry import ClaimRegistry
from claimreg.registry.errors import AlreadyExists, NotFound, NotOwner, RegistryError
from claimreg.registry.models import Entry
from claimreg.registry.sequence import BlockCounter, FileBlockCounter
from claimreg.registry.storage import JsonFileStorage, MemoryStorage

__all__ = [
    "AlreadyExists",
    "BlockCounter",
    "ClaimRegistry",
    "Entry",
    "FileBlockCounter",
    "JsonFileStorage",
    "MemoryStorage",
    "NotFound",
    "NotOwner",
    "RegistryError",
]
