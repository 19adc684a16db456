"""Tests for wastecal.data.models — categories and result dataclasses."""

from dataclasses import asdict
from datetime import date, datetime

from wastecal.data.models import (
    FetchResult,
    FetchSource,
    UrlProbeResult,
    WasteCategory,
    WasteCollection,
)


def test_category_values_are_stable_ids():
    assert [c.value for c in WasteCategory] == [
        "restmuell", "papier", "gelbesack", "bio", "laubsaecke",
    ]


def test_category_display_names():
    assert WasteCategory.RESTMUELL.display_name == "Restmüll"
    assert WasteCategory.PAPIER.display_name == "Papier/Altpapier"
    assert WasteCategory.GELBESACK.display_name == "Gelber Sack"
    assert WasteCategory.BIO.display_name == "Biotonne"
    assert WasteCategory.LAUBSAECKE.display_name == "Laubsäcke"


def test_category_sbazv_codes():
    assert WasteCategory.RESTMUELL.sbazv_code == "R"
    assert WasteCategory.GELBESACK.sbazv_code == "WB"
    assert WasteCategory.BIO.sbazv_code == ""


def test_collection_defaults():
    collection = WasteCollection(id="x", date=date(2025, 6, 10), type=WasteCategory.BIO)
    assert collection.street is None


def test_fetch_result_as_dict():
    result = FetchResult(
        success=True,
        collections=[WasteCollection(id="x", date=date(2025, 6, 10), type=WasteCategory.BIO)],
        fetched_at=datetime(2025, 6, 2, 6, 0),
        source=FetchSource.CACHE,
    )
    d = asdict(result)
    assert d["error"] is None
    assert d["collections"][0]["id"] == "x"
    assert d["source"] is FetchSource.CACHE


def test_probe_result_defaults():
    probe = UrlProbeResult(success=False, message="Invalid URL")
    assert probe.event_count == 0
    assert probe.hint is None
    assert probe.content_preview is None
