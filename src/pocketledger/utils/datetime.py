# File: src/pocketledger/utils/datetime.py
"""Timezone-aware datetime utilities."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """Get current UTC datetime (aware, serializes as ISO 8601 with offset)."""
    return datetime.now(timezone.utc)
