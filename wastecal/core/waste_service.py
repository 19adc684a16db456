"""
Zernsdorf Waste Calendar — Fetch Orchestrator.

Service layer that every outer surface (web route, daily sync trigger,
CLI) calls to get waste collections:

    fresh cache -> live SBAZV feed -> stale cache -> generated fallback

Live data is parsed and classified, then cached for the TTL (12 hours by
default) so the SBAZV servers are not hammered. Failures are routine here
(no URL configured, SBAZV down, expired export URL), so they are carried as
values through the chain and always end in a usable FetchResult tagged with
its source. Nothing raises to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Callable

from wastecal.config import DEFAULT_CACHE_TTL_HOURS, DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from wastecal.core.collection_mapper import to_collections
from wastecal.core.fallback import generate_fallback
from wastecal.core.ics_parser import count_vevents, parse_ics
from wastecal.data.cache import CollectionCache
from wastecal.data.models import (
    CacheStatus,
    ConfigStatus,
    FetchResult,
    FetchSource,
    UrlProbeResult,
    WasteCollection,
)
from wastecal.data.streets import feed_url_for_street, is_known_street, is_valid_feed_url
from wastecal.integrations.sbazv_feed import download_feed, is_calendar

if TYPE_CHECKING:
    from wastecal.ports.cache_port import CachePort

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=DEFAULT_CACHE_TTL_HOURS)

_FALLBACK_NOTICE = (
    "SBAZV data could not be fetched ({reason}). Showing an approximate schedule; "
    "upload the ICS file manually or try again later."
)
_STALE_CACHE_NOTICE = "Using cached data - SBAZV fetch failed ({reason})"
_INVALID_URL = "Invalid SBAZV URL. The URL must come from the SBAZV calendar export."


class WasteCalendarError(Exception):
    """Raised when the service is constructed with unusable settings."""


class WasteCalendarService:
    """Fetches, caches and degrades waste collection data for one portal."""

    def __init__(
        self,
        feed_url: str | None = None,
        cache: CachePort | None = None,
        ttl: timedelta = DEFAULT_TTL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if ttl <= timedelta(0):
            raise WasteCalendarError(f"Cache TTL must be positive, got {ttl}")
        if timeout <= 0:
            raise WasteCalendarError(f"Fetch timeout must be positive, got {timeout}")

        self._feed_url = (feed_url or "").strip() or None
        self._cache = cache if cache is not None else CollectionCache()
        self._ttl = ttl
        self._timeout = timeout
        self._user_agent = user_agent
        self._clock = clock or datetime.now
        self._fetch_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, cache: CachePort | None = None) -> WasteCalendarService:
        """Build a service from SBAZV_ICS_URL and friends in wastecal.config."""
        from wastecal.config import settings

        if not settings.has_feed_url:
            logger.info("SBAZV_ICS_URL not set, serving uploads and the generated schedule")
        return cls(
            feed_url=settings.SBAZV_ICS_URL,
            cache=cache,
            ttl=timedelta(hours=settings.CACHE_TTL_HOURS),
            timeout=settings.FETCH_TIMEOUT_SECONDS,
            user_agent=settings.USER_AGENT,
        )

    @property
    def has_feed_url(self) -> bool:
        return self._feed_url is not None

    def today(self) -> date:
        """Calendar day according to the service clock."""
        return self._clock().date()

    # ------------------------------------------------------------------
    # Fetch entry points
    # ------------------------------------------------------------------

    async def fetch_calendar(self, street: str | None = None) -> FetchResult:
        """Collections from the configured feed, honouring the cache TTL.

        With a street, cached results are narrowed to that street's records.
        """
        cached = self._fresh_cache_result(street)
        if cached is not None:
            return cached

        async with self._fetch_lock:
            # Another caller may have refreshed the cache while we waited.
            cached = self._fresh_cache_result(street)
            if cached is not None:
                return cached

            if self._feed_url is None:
                logger.warning("SBAZV_ICS_URL not configured, using fallback")
                return self._degrade(street, "no SBAZV feed URL configured")

            return await self._fetch_live(self._feed_url, street)

    async def fetch_for_street(self, street_name: str) -> FetchResult:
        """Collections for a street via the registry's feed URL lookup."""
        url = feed_url_for_street(street_name)
        if url is None:
            if is_known_street(street_name):
                reason = f'no feed URL registered for "{street_name}"'
            else:
                reason = f'unknown street "{street_name}"'
            logger.warning("No SBAZV feed for street '%s'", street_name)
            return self._degrade(street_name, reason)

        return await self._fetch_live(url, street_name)

    async def fetch_from_url(self, url: str, street: str | None = None) -> FetchResult:
        """Collections from a user-supplied feed URL. Does not touch the cache."""
        if not is_valid_feed_url(url):
            return self._failure(_INVALID_URL)

        download = await download_feed(url, timeout=self._timeout, user_agent=self._user_agent)
        if not download.ok:
            return self._failure(download.error)

        collections = self._ingest(download.content, street)
        return FetchResult(
            success=True,
            collections=collections,
            fetched_at=self._clock(),
            source=FetchSource.SBAZV,
        )

    def upload_ics(self, ics_content: str, street: str | None = None) -> FetchResult:
        """Import a manually downloaded ICS file and make it the cached data."""
        if not is_calendar(ics_content):
            logger.warning("Rejected upload without BEGIN:VCALENDAR")
            return self._failure("Invalid ICS file: missing BEGIN:VCALENDAR")

        collections = self._ingest(ics_content, street)
        now = self._clock()
        self._cache.store(collections, now)
        return FetchResult(
            success=True,
            collections=collections,
            fetched_at=now,
            source=FetchSource.SBAZV,
        )

    async def sync(self, force: bool = True) -> FetchResult:
        """Daily sync: optionally drop the cache, then fetch the global feed."""
        logger.info("Starting waste sync (force=%s)", force)
        if force:
            self.invalidate_cache()

        result = await self.fetch_calendar()
        if result.error:
            logger.warning(
                "Waste sync finished from %s with %d collections: %s",
                result.source.value, len(result.collections), result.error,
            )
        else:
            logger.info(
                "Waste sync finished from %s with %d collections",
                result.source.value, len(result.collections),
            )
        return result

    # ------------------------------------------------------------------
    # Cache + diagnostics
    # ------------------------------------------------------------------

    def cache_status(self) -> CacheStatus:
        return self._cache.status(self._clock())

    def invalidate_cache(self) -> None:
        self._cache.invalidate()

    def config_status(self) -> ConfigStatus:
        return ConfigStatus(has_feed_url=self.has_feed_url, cache=self.cache_status())

    async def probe_feed_url(self, url: str) -> UrlProbeResult:
        """Check that a candidate feed URL answers with a calendar.

        Uses the same timeout and validation as a live fetch but never
        stores anything in the cache.
        """
        if not url:
            return UrlProbeResult(success=False, message="URL missing", error="No URL given")

        if not is_valid_feed_url(url):
            return UrlProbeResult(success=False, message="Invalid URL", error=_INVALID_URL)

        download = await download_feed(url, timeout=self._timeout, user_agent=self._user_agent)
        if not download.ok:
            if download.content is not None:
                return UrlProbeResult(
                    success=False,
                    message="Not a calendar",
                    error="The URL does not return a valid ICS file",
                    content_preview=download.content[:200],
                )
            return UrlProbeResult(
                success=False,
                message="Fetch failed",
                error=download.error,
                hint="The URL may have expired. Generate a new one on the SBAZV portal.",
            )

        event_count = count_vevents(download.content)
        return UrlProbeResult(
            success=True,
            message="URL is valid",
            event_count=event_count,
            hint=(
                f"The ICS file contains {event_count} events. "
                "Set the URL as SBAZV_ICS_URL in your environment."
            ),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _fetch_live(self, url: str, street: str | None) -> FetchResult:
        download = await download_feed(url, timeout=self._timeout, user_agent=self._user_agent)
        if not download.ok:
            return self._degrade(street, download.error)

        collections = self._ingest(download.content, street)
        now = self._clock()
        self._cache.store(collections, now)
        return FetchResult(
            success=True,
            collections=collections,
            fetched_at=now,
            source=FetchSource.SBAZV,
        )

    def _ingest(self, ics_content: str, street: str | None) -> list[WasteCollection]:
        events = parse_ics(ics_content)
        collections = to_collections(events, street)
        logger.info(
            "Parsed %d events into %d collections for %s",
            len(events), len(collections), street or "all streets",
        )
        return collections

    def _fresh_cache_result(self, street: str | None) -> FetchResult | None:
        if not self._cache.is_fresh(self._clock(), self._ttl):
            return None
        cached = self._cache.get()
        if cached is None:
            return None
        collections, fetched_at = cached
        logger.debug("Serving %d collections from cache", len(collections))
        return FetchResult(
            success=True,
            collections=_for_street(collections, street),
            fetched_at=fetched_at,
            source=FetchSource.CACHE,
        )

    def _degrade(self, street: str | None, reason: str | None) -> FetchResult:
        """Stale cache if there is any, otherwise the generated schedule."""
        reason = reason or "unknown error"
        cached = self._cache.get()
        if cached is not None:
            collections, fetched_at = cached
            logger.warning("Falling back to cached data from %s: %s", fetched_at.isoformat(), reason)
            return FetchResult(
                success=True,
                collections=_for_street(collections, street),
                fetched_at=fetched_at,
                source=FetchSource.CACHE,
                error=_STALE_CACHE_NOTICE.format(reason=reason),
            )

        now = self._clock()
        logger.warning("Falling back to generated schedule: %s", reason)
        return FetchResult(
            success=True,
            collections=generate_fallback(street, today=now.date()),
            fetched_at=now,
            source=FetchSource.FALLBACK,
            error=_FALLBACK_NOTICE.format(reason=reason),
        )

    def _failure(self, error: str | None) -> FetchResult:
        return FetchResult(
            success=False,
            collections=[],
            fetched_at=self._clock(),
            source=FetchSource.FALLBACK,
            error=error or "Fetching the SBAZV calendar failed",
        )


def _for_street(collections: list[WasteCollection], street: str | None) -> list[WasteCollection]:
    if not street:
        return collections
    return [c for c in collections if c.street == street]
