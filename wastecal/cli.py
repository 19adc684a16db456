"""Command-line surface for the waste calendar service.

Prints JSON so the output can be piped into other tools:

    python main.py fetch --street Dorfaue --type papier --days 60
    python main.py fetch --next
    python main.py upload abfuhr.ics --street Dorfaue
    python main.py export muell.ics --street Dorfaue
    python main.py probe "https://fahrzeuge.sbazv.de/...&StandortID=..&AboID=.."
    python main.py feed-url 123456 7890 --type restmuell --type papier
    python main.py status
    python main.py streets
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import asdict, replace
from datetime import date, datetime
from enum import Enum
from pathlib import Path

from wastecal.config import settings
from wastecal.core.fallback import next_collection, upcoming_collections
from wastecal.core.ics_export import to_ics
from wastecal.core.waste_service import WasteCalendarService
from wastecal.data.models import FetchResult, WasteCategory
from wastecal.data.streets import ZERNSDORF_STREETS, build_feed_url

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 30


def _jsonable(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def _dump(obj: object) -> str:
    return json.dumps(asdict(obj), default=_jsonable, ensure_ascii=False, indent=2)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Zernsdorf waste collection calendar (SBAZV).")
    sub = ap.add_subparsers(dest="command", required=True)
    categories = [c.value for c in WasteCategory]

    fetch = sub.add_parser("fetch", help="Fetch collections (cache, feed or fallback).")
    fetch.add_argument("--street", help="Street tag / filter.")
    fetch.add_argument("--url", help="Personal SBAZV feed URL instead of SBAZV_ICS_URL.")
    fetch.add_argument("--type", choices=categories, help="Only this waste category.")
    fetch.add_argument(
        "--days", type=int, default=DEFAULT_WINDOW_DAYS,
        help=f"Days ahead to include (default {DEFAULT_WINDOW_DAYS}).",
    )
    fetch.add_argument("--next", action="store_true", help="Only the next pickup.")

    upload = sub.add_parser("upload", help="Import a downloaded SBAZV .ics file.")
    upload.add_argument("file", type=Path)
    upload.add_argument("--street")

    export = sub.add_parser("export", help="Write the current collections as .ics.")
    export.add_argument("out", type=Path)
    export.add_argument("--street")
    export.add_argument("--title", help="Calendar display name.")

    probe = sub.add_parser("probe", help="Test a feed URL without caching it.")
    probe.add_argument("url")

    feed_url = sub.add_parser("feed-url", help="Build a feed URL from StandortID and AboID.")
    feed_url.add_argument("location_id")
    feed_url.add_argument("subscription_id")
    feed_url.add_argument(
        "--type", action="append", choices=categories,
        help="Restrict to a category (repeatable; default all).",
    )

    sub.add_parser("status", help="Show feed configuration and cache state.")
    sub.add_parser("streets", help="List known Zernsdorf streets.")
    return ap


def _select(result: FetchResult, args: argparse.Namespace, today: date) -> str:
    """Apply --type, --next and --days to a fetch result, chronologically."""
    category = WasteCategory(args.type) if args.type else None
    collections = sorted(result.collections, key=lambda c: c.date)
    if category is not None:
        collections = [c for c in collections if c.type is category]

    if args.next:
        found = next_collection(collections, category, today=today)
        return json.dumps({
            "success": result.success,
            "next": asdict(found) if found is not None else None,
            "source": result.source.value,
            "error": result.error,
        }, default=_jsonable, ensure_ascii=False, indent=2)

    upcoming = upcoming_collections(collections, days=args.days, today=today)
    return _dump(replace(result, collections=upcoming))


async def _run(args: argparse.Namespace, service: WasteCalendarService) -> int:
    if args.command == "fetch":
        if args.url:
            result = await service.fetch_from_url(args.url, args.street)
        else:
            result = await service.fetch_calendar(args.street)
        print(_select(result, args, service.today()))
        return 0 if result.success else 1

    if args.command == "upload":
        content = args.file.read_text(encoding="utf-8")
        result = service.upload_ics(content, args.street)
        print(_dump(result))
        return 0 if result.success else 1

    if args.command == "export":
        result = await service.fetch_calendar(args.street)
        title = args.title or settings.CALENDAR_TITLE
        args.out.write_text(to_ics(result.collections, title), encoding="utf-8")
        logger.info("Wrote %d collections to %s", len(result.collections), args.out)
        print(json.dumps({
            "out": str(args.out),
            "collections": len(result.collections),
            "source": result.source.value,
            "error": result.error,
        }, ensure_ascii=False, indent=2))
        return 0

    if args.command == "probe":
        probe = await service.probe_feed_url(args.url)
        print(_dump(probe))
        return 0 if probe.success else 1

    if args.command == "feed-url":
        categories = [WasteCategory(t) for t in args.type] if args.type else None
        print(build_feed_url(args.location_id, args.subscription_id, categories))
        return 0

    if args.command == "status":
        print(_dump(service.config_status()))
        return 0

    if args.command == "streets":
        print(json.dumps(list(ZERNSDORF_STREETS), ensure_ascii=False, indent=2))
        return 0

    return 2


def _configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    _configure_logging()
    args = _build_parser().parse_args(argv)
    service = WasteCalendarService.from_settings()
    return asyncio.run(_run(args, service))
