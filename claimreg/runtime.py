"""Wiring of a file-backed registry from :class:`~claimreg.config.Settings`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from claimreg.config import Settings
from claimreg.events import AuditLogSink
from claimreg.registry.claim_registry import ClaimRegistry
from claimreg.registry.sequence import FileBlockCounter
from claimreg.registry.storage import JsonFileStorage


@dataclass
class Runtime:
    """A registry together with the collaborators it was built from."""

    settings: Settings
    registry: ClaimRegistry
    blocks: FileBlockCounter
    audit: Optional[AuditLogSink] = None


def build_runtime(settings: Settings) -> Runtime:
    settings.home.mkdir(parents=True, exist_ok=True)
    blocks = FileBlockCounter(settings.chain_path)
    audit = AuditLogSink(settings.audit_dir) if settings.audit_log else None
    registry = ClaimRegistry(
        sequence_source=blocks,
        sink=audit,
        storage=JsonFileStorage(settings.claims_path),
    )
    return Runtime(settings=settings, registry=registry, blocks=blocks, audit=audit)
