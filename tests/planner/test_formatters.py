import json

import pytest

from transitfinder.config import Config
from transitfinder.planner.finder import TransitFinder
from transitfinder.planner.formatters import (
    CALENDAR_HEADER,
    format_calendar_csv,
    format_html,
    format_json,
    format_text,
)
from transitfinder.planner.types import Ephemeris, ObservationType, Target


@pytest.fixture
def result(make_constraints, equinox_noon_jd):
    constraints = make_constraints(min_mid_elevation_deg=30.0, min_start_end_elevation_deg=20.0)
    targets = [
        Target(
            name="Alpha <b>",
            ra_deg=180.0,
            dec_deg=0.0,
            ephemeris=Ephemeris(epoch_jd=equinox_noon_jd - 0.5, period_days=1.0, duration_hours=2.0),
            comments="deep, short",
            depth_ppt=12.0,
        ),
        Target(
            name="Beta",
            ra_deg=170.0,
            dec_deg=0.0,
            ephemeris=Ephemeris(epoch_jd=equinox_noon_jd - 0.45, period_days=1.0, duration_hours=2.0),
        ),
        Target(name="Gamma", ra_deg=185.0, dec_deg=5.0, observation_type=ObservationType.ANYTIME),
    ]
    return TransitFinder(Config({})).find(constraints=constraints, targets=targets)


def test_events_share_one_night(result):
    assert [s.record.target.name for s in result.events] == ["Alpha <b>", "Beta"]
    assert [s.night_run_length for s in result.events] == [2, 0]


def test_format_text(result):
    text = format_text(result)
    assert "Site: Equator" in text
    assert "Night of 2024-03-20" in text
    assert "Alpha <b>" in text
    assert "Any-time targets" in text
    assert "Gamma" in text
    # Alpha's mid-point is exactly midnight UTC.
    assert "mid 00:00" in text


def test_format_text_verbose(result):
    text = format_text(result, verbose=True)
    assert "12:00:00.00 +00:00:00.0" in text
    assert "cycle 1" in text


def test_format_json(result):
    payload = json.loads(format_json(result))
    assert len(payload["events"]) == 2
    assert payload["events"][0]["night_run_length"] == 2
    assert payload["events"][0]["record"]["night"] == "2024-03-20"
    assert payload["events"][0]["record"]["target"]["observation_type"] == 1
    assert payload["anytime"][0]["target"]["name"] == "Gamma"


def test_format_calendar_csv(result):
    lines = format_calendar_csv(result).splitlines()
    assert lines[0] == ",".join(CALENDAR_HEADER)
    assert len(lines) == 3
    assert lines[1].startswith("Alpha <b>,03/20/2024,11:00 PM,03/21/2024,01:00 AM,False,")
    assert '"Mid 00:00; ' in lines[1]
    assert "deep, short" in lines[1]


def test_calendar_csv_uses_baseline(make_constraints, equinox_noon_jd):
    constraints = make_constraints(baseline_hours=1.0)
    target = Target(
        name="Alpha",
        ra_deg=180.0,
        dec_deg=0.0,
        ephemeris=Ephemeris(epoch_jd=equinox_noon_jd - 0.5, period_days=1.0, duration_hours=2.0),
    )
    result = TransitFinder(Config({})).find(constraints=constraints, targets=[target])
    row = format_calendar_csv(result).splitlines()[1]
    assert row.startswith("Alpha,03/20/2024,10:00 PM,03/21/2024,02:00 AM,False,")


def test_format_html(result):
    page = format_html(result)
    assert page.count('rowspan="2"') == 1
    assert page.count("<tr>") == 3
    assert "Alpha &lt;b&gt;" in page
    assert "Alpha <b>" not in page


def test_empty_result_message(make_constraints):
    constraints = make_constraints()
    result = TransitFinder(Config({})).find(constraints=constraints, targets=[])
    assert result.message.startswith("No observable events")
    assert result.message in format_text(result)
    assert format_calendar_csv(result).strip() == ",".join(CALENDAR_HEADER)
