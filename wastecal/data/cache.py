"""
Zernsdorf Waste Calendar — In-memory collection cache.

Holds the last successful feed result so the SBAZV servers are asked at
most once per TTL. Process-local and best effort: a restart empties it,
and the fallback generator covers that case.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from wastecal.data.models import CacheStatus, WasteCollection

logger = logging.getLogger(__name__)


class CollectionCache:
    """Single slot of (collections, fetched_at). An empty batch counts as no cache."""

    def __init__(self) -> None:
        self._collections: list[WasteCollection] = []
        self._fetched_at: datetime | None = None

    def get(self) -> tuple[list[WasteCollection], datetime] | None:
        """Return a copy of the cached batch and its timestamp, or None."""
        if not self._collections or self._fetched_at is None:
            return None
        return list(self._collections), self._fetched_at

    def store(self, collections: list[WasteCollection], fetched_at: datetime) -> None:
        self._collections = list(collections)
        self._fetched_at = fetched_at
        logger.debug("Cached %d collections at %s", len(collections), fetched_at.isoformat())

    def invalidate(self) -> None:
        self._collections = []
        self._fetched_at = None
        logger.info("Collection cache invalidated")

    def age(self, now: datetime) -> timedelta | None:
        if self._fetched_at is None:
            return None
        return now - self._fetched_at

    def is_fresh(self, now: datetime, ttl: timedelta) -> bool:
        """True if the cache holds data younger than `ttl`."""
        if not self._collections:
            return False
        age = self.age(now)
        return age is not None and age < ttl

    def status(self, now: datetime) -> CacheStatus:
        age = self.age(now)
        return CacheStatus(
            has_cache=bool(self._collections),
            fetched_at=self._fetched_at,
            collection_count=len(self._collections),
            age_minutes=_whole_minutes(age) if age is not None else None,
        )


def _whole_minutes(age: timedelta) -> int:
    # halves round up: 2.5 minutes reports as 3
    return math.floor(age.total_seconds() / 60 + 0.5)
