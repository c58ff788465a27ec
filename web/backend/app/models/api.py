"""Pydantic models for API request/response serialization.

These models mirror the claimreg dataclasses and provide JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ClaimResponse(BaseModel):
    """Mirrors claimreg.registry.models.Entry."""

    key_hex: str
    key_text: str
    owner: str
    sequence: int


class ClaimListResponse(BaseModel):
    entries: list[ClaimResponse] = Field(default_factory=list)
    total_count: int = 0


class BlockResponse(BaseModel):
    block_number: int


class EventResponse(BaseModel):
    """Mirrors claimreg.events.AuditRecord."""

    id: str
    timestamp: str
    kind: str
    caller: str
    key_hex: Optional[str] = None
