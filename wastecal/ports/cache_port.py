"""Cache port — the interface the waste service uses to keep fetched collections.

The service depends on this protocol, never on a specific storage.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol

from wastecal.data.models import CacheStatus, WasteCollection


class CachePort(Protocol):
    """Single-slot store for the last successful fetch."""

    def get(self) -> tuple[list[WasteCollection], datetime] | None: ...

    def store(self, collections: list[WasteCollection], fetched_at: datetime) -> None: ...

    def invalidate(self) -> None: ...

    def age(self, now: datetime) -> timedelta | None: ...

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool: ...

    def status(self, now: datetime) -> CacheStatus: ...
