"""Core utility functions for the RBS pipeline."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    """Return a random identifier such as ``sync-3f2a...``."""
    return f"{prefix}-{uuid4().hex[:12]}"
