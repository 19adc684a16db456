"""Tests for wastecal.cli — JSON command-line surface."""

import json
from unittest.mock import patch

import pytest

from conftest import SAMPLE_ICS

from wastecal.cli import main
from wastecal.core.waste_service import WasteCalendarService
from wastecal.data.streets import ZERNSDORF_STREETS


@pytest.fixture
def service(cache, clock):
    svc = WasteCalendarService(feed_url=None, cache=cache, clock=clock)
    with patch("wastecal.cli.WasteCalendarService.from_settings", return_value=svc):
        yield svc


def test_fetch_without_feed_prints_fallback(service, capsys):
    assert main(["fetch", "--street", "Dorfaue"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["source"] == "fallback"
    assert out["collections"][0]["street"] == "Dorfaue"


def test_fetch_with_invalid_url_fails(service, capsys):
    assert main(["fetch", "--url", "https://example.com/a.ics"]) == 1
    out = json.loads(capsys.readouterr().out)
    assert out["success"] is False


def test_upload(service, tmp_path, capsys):
    ics = tmp_path / "abfuhr.ics"
    ics.write_text(SAMPLE_ICS, encoding="utf-8")
    assert main(["upload", str(ics), "--street", "Dorfaue"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert [c["type"] for c in out["collections"]] == ["restmuell", "gelbesack", "papier"]
    assert out["collections"][0]["date"] == "2025-06-10"


def test_export_writes_calendar(service, tmp_path, capsys):
    target = tmp_path / "muell.ics"
    assert main(["export", str(target), "--title", "Test"]) == 0
    text = target.read_text(encoding="utf-8")
    assert "X-WR-CALNAME:Test" in text
    assert json.loads(capsys.readouterr().out)["source"] == "fallback"


def test_status(service, capsys):
    assert main(["status"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out == {
        "has_feed_url": False,
        "cache": {"has_cache": False, "fetched_at": None, "collection_count": 0, "age_minutes": None},
    }


def test_streets(service, capsys):
    assert main(["streets"]) == 0
    assert json.loads(capsys.readouterr().out) == list(ZERNSDORF_STREETS)


def _fetch_json(argv, capsys):
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


class TestFetchFilters:
    def test_sorted_and_windowed_to_thirty_days(self, service, clock, capsys):
        out = _fetch_json(["fetch"], capsys)
        dates = [c["date"] for c in out["collections"]]
        assert dates == sorted(dates)
        assert dates[-1] <= "2025-07-02"

    def test_days_window(self, service, capsys):
        # clock starts Monday 2025-06-02
        out = _fetch_json(["fetch", "--days", "7"], capsys)
        assert {c["date"] for c in out["collections"]} <= {
            "2025-06-03", "2025-06-04", "2025-06-05", "2025-06-06", "2025-06-09",
        }
        assert out["collections"]

    def test_type_filter(self, service, capsys):
        out = _fetch_json(["fetch", "--type", "restmuell", "--days", "60"], capsys)
        assert {c["type"] for c in out["collections"]} == {"restmuell"}
        assert len(out["collections"]) == 5

    def test_next_only(self, service, capsys):
        out = _fetch_json(["fetch", "--next"], capsys)
        assert out["source"] == "fallback"
        assert out["next"]["date"] == "2025-06-03"
        assert out["next"]["type"] == "restmuell"

    def test_next_of_type(self, service, capsys):
        out = _fetch_json(["fetch", "--next", "--type", "papier"], capsys)
        assert out["next"]["date"] == "2025-06-11"

    def test_unsorted_cache_is_sorted_before_filtering(self, service, capsys):
        # SAMPLE_ICS lists the 10th, 12th and 18th; feed them in reverse
        blocks = SAMPLE_ICS.split("BEGIN:VEVENT")
        reversed_ics = blocks[0] + "".join("BEGIN:VEVENT" + b for b in reversed(blocks[1:]))
        reversed_ics = reversed_ics.replace("END:VCALENDAR\r\n", "")
        service.upload_ics(reversed_ics + "END:VCALENDAR\r\n")
        out = _fetch_json(["fetch", "--next"], capsys)
        assert out["next"]["id"] == "sbazv-1"


def test_feed_url_command(service, capsys):
    assert main(["feed-url", "123", "456", "--type", "restmuell", "--type", "gelbesack"]) == 0
    url = capsys.readouterr().out.strip()
    assert "StandortID=123&AboID=456" in url
    assert url.endswith("Fra=R;WB")


def test_main_configures_logging(service, capsys):
    with patch("wastecal.cli.logging.basicConfig") as basic_config:
        main(["streets"])
    _, kwargs = basic_config.call_args
    assert kwargs["format"] == "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
