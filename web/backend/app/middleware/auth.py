"""Auth middleware -- FastAPI dependency for extracting the calling account.

Signature checking is done by the gateway in front of this API, which
forwards the verified account in the ``X-Account-Id`` header. A request
without it is treated as an unsigned origin and rejected.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Header, HTTPException, status

from claimreg.auth.origin import BadOrigin, Caller, Origin, ensure_signed


async def get_current_caller(
    x_account_id: Optional[str] = Header(None, alias="X-Account-Id"),
) -> Caller:
    """FastAPI dependency returning the signed caller of this request.

    Raises ``401 Unauthorized`` when no account is forwarded.
    """
    origin = Origin.signed(x_account_id) if x_account_id else Origin.none()
    try:
        return ensure_signed(origin)
    except BadOrigin as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        )
