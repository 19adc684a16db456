"""SBAZV calendar feed download.

Fetches the ICS export of one address from the SBAZV waste-vehicle service
and checks that the body really is a calendar.

Gracefully degrades: every failure (timeout, connection error, non-2xx
status, HTML error page instead of ICS) comes back as a FeedDownload with
ok=False and a readable reason. Nothing is raised to the caller.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from wastecal.config import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from wastecal.data.models import FeedDownload

logger = logging.getLogger(__name__)

CALENDAR_MARKER = "BEGIN:VCALENDAR"
_ACCEPT = "text/calendar, application/ics, */*"


def is_calendar(content: str) -> bool:
    return CALENDAR_MARKER in content


async def _get(url: str, timeout: float, user_agent: str) -> httpx.Response:
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        resp = await client.get(
            url,
            headers={
                "Accept": _ACCEPT,
                "User-Agent": user_agent,
            },
        )
        resp.raise_for_status()
        return resp


async def download_feed(
    url: str,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> FeedDownload:
    """GET `url` and return its ICS text, or the reason it couldn't be had.

    `timeout` bounds the whole exchange, body included, not just each read.
    """
    logger.info("Fetching SBAZV feed from %s...", url[:80])

    try:
        resp = await asyncio.wait_for(_get(url, timeout, user_agent), timeout)
        content = resp.text
    except (asyncio.TimeoutError, httpx.TimeoutException):
        logger.warning("SBAZV feed timed out after %gs", timeout)
        return FeedDownload(ok=False, error=f"SBAZV did not answer within {timeout:g} seconds")
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        logger.warning("SBAZV feed returned HTTP %d", status)
        return FeedDownload(
            ok=False,
            error=f"SBAZV returned {status}: {exc.response.reason_phrase}",
            status_code=status,
        )
    except httpx.HTTPError as exc:
        logger.warning("SBAZV feed request failed: %s", exc)
        return FeedDownload(ok=False, error=f"SBAZV request failed: {exc}")
    except Exception as exc:
        logger.error("Unexpected error fetching SBAZV feed: %s", exc)
        return FeedDownload(ok=False, error=f"SBAZV request failed: {exc}")

    logger.info("Received %d characters from SBAZV", len(content))

    if not is_calendar(content):
        logger.error("SBAZV response is not a calendar, first 200 chars: %r", content[:200])
        return FeedDownload(
            ok=False,
            content=content,
            error="Invalid ICS content received - not a valid calendar file",
            status_code=resp.status_code,
        )

    return FeedDownload(ok=True, content=content, status_code=resp.status_code)
