"""E2E tests for the eventhub CLI.

Each test exercises the full CLI path: argv -> parse_args -> config.configure
-> load -> ViewSynchronizer -> stdout / stderr / exit code.

Nothing is mocked except the default config location; event data is written
to a temp directory and read back through DiskProvider.
"""

from __future__ import annotations

import json
import pathlib
import sys
from datetime import date, timedelta
from unittest import mock

import pytest

import eventhub.cli as cli
import eventhub.config as config


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _day(offset: int) -> str:
    return (date.today() + timedelta(days=offset)).isoformat()


SAMPLE_EVENTS = [
    {
        "name": "AI Meetup",
        "start_date": _day(1),
        "end_date": _day(1),
        "location": "San Francisco",
        "free_or_paid": "free",
        "organization_url": "https://example.org/ai-meetup",
        "featured": True,
        "region": "AMER",
        "lat": 37.78,
        "lng": -122.42,
    },
    {
        "name": "Tech Talk",
        "start_date": _day(2),
        "end_date": _day(2),
        "location": "Online",
        "free_or_paid": "paid",
        "organization_url": "https://example.org/tech-talk",
        "featured": True,
        "region": "Online",
    },
    {
        "name": "Robotics Week",
        "start_date": _day(-2),
        "end_date": _day(0),
        "location": "Munich",
        "free_or_paid": "paid",
        "organization_url": "https://example.org/robotics",
        "featured": True,
        "region": "EMEA",
        "lat": 48.14,
        "lng": 11.58,
    },
    {
        "name": "Finished Conf",
        "start_date": _day(-10),
        "end_date": _day(-1),
        "location": "Madrid",
        "free_or_paid": "free",
        "organization_url": "https://example.org/finished",
        "featured": True,
        "region": "EMEA",
        "lat": 40.42,
        "lng": -3.70,
    },
]


def _write_data(tmp_path, events=None, name: str = "events.json") -> pathlib.Path:
    """Write an event dataset into *tmp_path*."""
    if events is None:
        events = SAMPLE_EVENTS
    path = tmp_path / name
    path.write_text(json.dumps(events, indent=2), encoding="utf-8")
    return path


def _write_config(tmp_path, content: str = "") -> pathlib.Path:
    """Write a TOML config string to a temp file and return the path."""
    path = tmp_path / "config.toml"
    path.write_text(content, encoding="utf-8")
    return path


def _run_cli(argv):
    """Run CLI with given argv list, return exit code."""
    with mock.patch.object(sys, "argv", ["eventhub"] + list(argv)):
        try:
            return cli.main()
        except SystemExit as exc:
            return exc.code


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_config(tmp_path):
    """Prevent tests from writing to the real ~/.eventhub/ directory."""
    isolated = tmp_path / "default-config.toml"
    with mock.patch.object(cli, "DEFAULT_CONFIG_PATH", isolated):
        yield
    config._reset()


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


def test_query_missing_data_exits_1(tmp_path, capsys):
    rc = _run_cli(["--data", str(tmp_path / "nope.json")])
    assert rc == 1
    out = capsys.readouterr().out
    assert "Failed to load events." in out
    assert "Map: No mappable events" in out


def test_query_lists_current_and_upcoming(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "3 matches" in out
    assert "AI Meetup" in out
    assert "Robotics Week" in out
    assert "Finished Conf" not in out
    assert "Map: 2 events on map" in out


def test_query_search_single_match(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "--search", "MUNICH"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "1 match" in out
    assert "Robotics Week" in out
    assert "AI Meetup" not in out
    assert "Map: 1 event on map" in out


def test_query_no_matches(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "--search", "zzz"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "No matches" in out
    assert "Map: No mappable events" in out


def test_query_past_event_never_matches(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "--search", "madrid"])
    assert rc == 0
    assert "No matches" in capsys.readouterr().out


def test_query_json_keeps_list_and_map_in_step(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "--json", "--price", "paid"])
    assert rc == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["status"] == "2 matches"
    names = [e["name"] for e in doc["events"]]
    assert names == ["Tech Talk", "Robotics Week"]
    assert [p["name"] for p in doc["map"]["points"]] == ["Robotics Week"]
    assert doc["map"]["bounds"] is not None
    assert doc["query"]["price"] == "paid"


def test_query_json_load_failure(tmp_path, capsys):
    rc = _run_cli(["--data", str(tmp_path / "nope.json"), "--json"])
    assert rc == 1
    doc = json.loads(capsys.readouterr().out)
    assert doc["state"] == "error"
    assert doc["status"] == "Failed to load events."
    assert doc["events"] == []
    assert doc["map"]["view"] == {"center": [0.0, 0.0], "zoom": 2}


def test_query_region_filter(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "--region", "EMEA"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Robotics Week" in out
    assert "Finished Conf" not in out


def test_query_date_filter(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "--date", _day(2)])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Tech Talk" in out
    assert "AI Meetup" not in out


def test_query_yaml_data(tmp_path, capsys):
    path = tmp_path / "events.yaml"
    path.write_text(
        "events:\n"
        "  - title: Community Meetup\n"
        f"    date: {_day(5)}\n"
        "    location: Lyon\n"
        "    region: EMEA\n",
        encoding="utf-8",
    )
    rc = _run_cli(["--data", str(path)])
    assert rc == 0
    assert "Community Meetup" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# featured / map / regions
# ---------------------------------------------------------------------------


def test_featured_columns(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "featured"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Featured #1" in out
    assert "Featured #3" in out
    assert "Finished Conf" not in out


def test_featured_json_buckets(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "featured", "--buckets", "2", "--json"])
    assert rc == 0
    doc = json.loads(capsys.readouterr().out)
    columns = [[e["name"] for e in bucket] for bucket in doc["featured"]]
    assert columns == [["AI Meetup", "Robotics Week"], ["Tech Talk"]]


def test_featured_none(tmp_path, capsys):
    data = _write_data(tmp_path, [dict(SAMPLE_EVENTS[0], featured=False)])
    rc = _run_cli(["--data", str(data), "featured"])
    assert rc == 0
    assert "No featured events." in capsys.readouterr().out


def test_featured_invalid_buckets(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "featured", "--buckets", "0"])
    assert rc == 2


def test_featured_load_failure(tmp_path, capsys):
    rc = _run_cli(["--data", str(tmp_path / "nope.json"), "featured"])
    assert rc == 1
    assert "Failed to load events." in capsys.readouterr().err


def test_map_markers(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "map"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Map: 2 events on map" in out
    assert "AI Meetup" in out
    assert "bounds:" in out


def test_map_default_view_when_unmappable(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "map", "--search", "online"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Map: No mappable events" in out
    assert "zoom 2" in out


def test_map_json(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "map", "--json", "--region", "AMER"])
    assert rc == 0
    doc = json.loads(capsys.readouterr().out)
    assert doc["type"] == "map"
    assert doc["status"] == "1 event on map"
    assert doc["bounds"] == {"south": 37.78, "west": -122.42, "north": 37.78, "east": -122.42}


def test_regions(tmp_path, capsys):
    data = _write_data(tmp_path)
    rc = _run_cli(["--data", str(data), "regions"])
    assert rc == 0
    assert capsys.readouterr().out.splitlines() == ["AMER", "EMEA", "Online"]


def test_regions_missing_data(tmp_path, capsys):
    rc = _run_cli(["--data", str(tmp_path / "nope.json"), "regions"])
    assert rc == 1
    assert "not found" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def test_default_config_created(tmp_path):
    data = _write_data(tmp_path)
    _run_cli(["--data", str(data)])
    assert (tmp_path / "default-config.toml").is_file()


def test_explicit_config_not_created(tmp_path):
    data = _write_data(tmp_path)
    missing = tmp_path / "missing.toml"
    rc = _run_cli(["--data", str(data), "--config", str(missing)])
    assert rc == 0
    assert not missing.exists()


def test_config_featured_buckets(tmp_path, capsys):
    data = _write_data(tmp_path)
    cfg = _write_config(tmp_path, "featured_buckets = 1\n")
    rc = _run_cli(["--data", str(data), "--config", str(cfg), "featured"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "Featured #1" in out
    assert "Featured #2" not in out


def test_config_invalid_padding(tmp_path, capsys):
    cfg = _write_config(tmp_path, 'map_padding = "wide"\n')
    rc = _run_cli(["--config", str(cfg)])
    assert rc == 2
    assert "map_padding" in capsys.readouterr().err


def test_saved_search_runs(tmp_path, capsys):
    data = _write_data(tmp_path)
    cfg = _write_config(tmp_path, '[searches]\nemea = ["--region", "EMEA", "--json"]\n')
    rc = _run_cli(["--data", str(data), "--config", str(cfg), "sc", "emea"])
    assert rc == 0
    doc = json.loads(capsys.readouterr().out)
    assert [e["name"] for e in doc["events"]] == ["Robotics Week"]


def test_saved_search_invalid_name(tmp_path, capsys):
    cfg = _write_config(tmp_path, '[searches]\n"bad name" = ["--price", "free"]\n')
    rc = _run_cli(["--config", str(cfg), "sc", "bad name"])
    assert rc == 2
    assert "invalid" in capsys.readouterr().err
