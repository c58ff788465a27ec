"""Claim Registry — owner-gated title claims stamped with a block number."""

__version__ = "0.1.0"
