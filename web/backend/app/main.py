"""FastAPI application for the claim registry.

Provides REST API endpoints wrapping the claimreg package for:
- Claiming titles (create)
- Owner-gated read, re-stamp (update) and release (remove)
- Listing claims, the current block number and the audit log
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from claimreg import __version__
from web.backend.app.routers import claims

app = FastAPI(
    title="Claim Registry API",
    description=(
        "REST API for the claim registry. Titles are claimed by the calling "
        "account and can afterwards only be read, re-stamped or released by "
        "that account."
    ),
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS middleware (allow all origins for development)
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(claims.router)


# ---------------------------------------------------------------------------
# Root and health-check endpoints
# ---------------------------------------------------------------------------


@app.get("/", tags=["meta"])
async def root():
    """Return basic API information."""
    return {
        "name": "Claim Registry API",
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
    }


@app.get("/health", tags=["meta"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
