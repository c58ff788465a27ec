"""Claims router -- owner-gated create/read/update/remove of title claims."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from claimreg.auth.origin import Caller
from claimreg.config import load_settings
from claimreg.registry.errors import AlreadyExists, NotFound, NotOwner, RegistryError
from claimreg.registry.models import Entry, parse_key
from claimreg.runtime import Runtime, build_runtime

from web.backend.app.middleware.auth import get_current_caller
from web.backend.app.models.api import (
    BlockResponse,
    ClaimListResponse,
    ClaimResponse,
    EventResponse,
)

router = APIRouter(prefix="/api/claims", tags=["claims"])

_ERROR_STATUS: dict[type[RegistryError], int] = {
    AlreadyExists: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
    NotOwner: status.HTTP_403_FORBIDDEN,
}

# Shared runtime instance
_runtime: Optional[Runtime] = None


def get_runtime() -> Runtime:
    """Return the singleton Runtime built from the environment settings."""
    global _runtime
    if _runtime is None:
        _runtime = build_runtime(load_settings())
    return _runtime


def _entry_to_response(entry: Entry) -> ClaimResponse:
    return ClaimResponse(
        key_hex=entry.key_hex,
        key_text=entry.key_text,
        owner=entry.owner,
        sequence=entry.sequence,
    )


def _key(key: str, as_hex: bool) -> bytes:
    try:
        return parse_key(key, as_hex=as_hex)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid key: {exc}")


def _run(runtime: Runtime, operation: str, caller: Caller, key: bytes) -> ClaimResponse:
    try:
        entry = getattr(runtime.registry, operation)(caller, key)
    except RegistryError as exc:
        raise HTTPException(
            status_code=_ERROR_STATUS[type(exc)],
            detail={"code": exc.code, "message": str(exc)},
        )
    return _entry_to_response(entry)


@router.get("", response_model=ClaimListResponse, summary="List all claims")
async def list_claims(runtime: Runtime = Depends(get_runtime)):
    """List every claim in the registry."""
    entries = sorted(runtime.registry.entries(), key=lambda e: e.key)
    return ClaimListResponse(
        entries=[_entry_to_response(e) for e in entries],
        total_count=len(entries),
    )


@router.get("/-/block", response_model=BlockResponse, summary="Current block number")
async def current_block(runtime: Runtime = Depends(get_runtime)):
    return BlockResponse(block_number=runtime.blocks.current())


@router.get("/-/events", response_model=list[EventResponse], summary="Audit log")
async def list_events(
    caller: Optional[str] = Query(None, description="Only events by this account"),
    kind: Optional[str] = Query(None, description="created, read, updated or removed"),
    limit: int = Query(200, ge=1, le=10000),
    runtime: Runtime = Depends(get_runtime),
):
    """Return recorded events, newest first."""
    if runtime.audit is None:
        raise HTTPException(status_code=404, detail="Audit log is disabled")
    records = runtime.audit.get_events(caller=caller, kind=kind, limit=limit)
    return [
        EventResponse(
            id=r.id,
            timestamp=r.timestamp,
            kind=r.kind,
            caller=r.caller,
            key_hex=r.key,
        )
        for r in records
    ]


@router.post(
    "/{key}",
    response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Claim a title",
)
async def create_claim(
    key: str,
    as_hex: bool = Query(False, alias="hex", description="Interpret the key as hex bytes"),
    caller: Caller = Depends(get_current_caller),
    runtime: Runtime = Depends(get_runtime),
):
    return _run(runtime, "create", caller, _key(key, as_hex))


@router.get("/{key}", response_model=ClaimResponse, summary="Read an owned claim")
async def read_claim(
    key: str,
    as_hex: bool = Query(False, alias="hex", description="Interpret the key as hex bytes"),
    caller: Caller = Depends(get_current_caller),
    runtime: Runtime = Depends(get_runtime),
):
    return _run(runtime, "read", caller, _key(key, as_hex))


@router.put("/{key}", response_model=ClaimResponse, summary="Re-stamp an owned claim")
async def update_claim(
    key: str,
    as_hex: bool = Query(False, alias="hex", description="Interpret the key as hex bytes"),
    caller: Caller = Depends(get_current_caller),
    runtime: Runtime = Depends(get_runtime),
):
    return _run(runtime, "update", caller, _key(key, as_hex))


@router.delete("/{key}", response_model=ClaimResponse, summary="Release an owned claim")
async def remove_claim(
    key: str,
    as_hex: bool = Query(False, alias="hex", description="Interpret the key as hex bytes"),
    caller: Caller = Depends(get_current_caller),
    runtime: Runtime = Depends(get_runtime),
):
    """Remove the claim and return it as it was before removal."""
    return _run(runtime, "remove", caller, _key(key, as_hex))
