"""Caller identity — dispatch origins and the caller tokens derived from them."""

from claimreg.auth.origin import BadOrigin, Caller, Origin, OriginKind, ensure_signed

__all__ = ["BadOrigin", "Caller", "Origin", "OriginKind", "ensure_signed"]
