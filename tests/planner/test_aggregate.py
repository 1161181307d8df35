import datetime

import pytest

from transitfinder.planner.aggregate import (
    aggregate,
    annotate_night_runs,
    group_by_night,
    sort_permutation,
)
from transitfinder.planner.astro import jd_to_datetime
from transitfinder.planner.events import EnumerationResult
from transitfinder.planner.types import EventPoint, EventRecord, Target


BASE_JD = 2460380.0


def _point(jd):
    utc = jd_to_datetime(jd)
    return EventPoint(
        jd=jd,
        utc=utc,
        local=utc,
        elevation_deg=45.0,
        azimuth_deg=180.0,
        hour_angle_hours=0.0,
        is_daytime=False,
        elevation_ok=True,
    )


def _record(name, offset, night):
    jd = BASE_JD + offset
    return EventRecord(
        target=Target(name=name, ra_deg=0.0, dec_deg=0.0),
        cycle=0,
        start=_point(jd - 0.05),
        mid=_point(jd),
        end=_point(jd + 0.05),
        starts_before_sunset=False,
        middle_in_daytime=False,
        ends_after_sunrise=False,
        night=night,
        sunset_jd=jd - 0.2,
        sunrise_jd=jd + 0.2,
        moon_separation_deg=90.0,
        moon_illumination=0.5,
    )


def _result(*records):
    return EnumerationResult(records=list(records), jds=[r.mid.jd for r in records])


D1 = datetime.date(2024, 3, 20)
D2 = datetime.date(2024, 3, 21)
D3 = datetime.date(2024, 3, 22)


def test_sort_permutation_is_stable():
    assert sort_permutation([3.0, 1.0, 2.0, 1.0]) == [1, 3, 2, 0]
    assert sort_permutation([]) == []


def test_aggregate_sorts_across_targets_and_counts_runs():
    a = _result(_record("A", 10.5, D1), _record("A", 12.5, D3))
    b = _result(_record("B", 10.7, D1), _record("B", 11.5, D2))
    scheduled = aggregate([a, b])

    assert [s.record.mid.jd - BASE_JD for s in scheduled] == pytest.approx([10.5, 10.7, 11.5, 12.5])
    assert [s.record.target.name for s in scheduled] == ["A", "B", "B", "A"]
    assert [s.night_run_length for s in scheduled] == [2, 0, 1, 1]


def test_run_lengths_sum_to_record_count():
    records = [
        _record("A", 1.0, D1),
        _record("B", 1.1, D1),
        _record("C", 1.2, D1),
        _record("A", 2.0, D2),
        _record("B", 3.0, D3),
        _record("C", 3.1, D3),
    ]
    scheduled = annotate_night_runs(records)
    assert [s.night_run_length for s in scheduled] == [3, 0, 0, 1, 2, 0]
    assert sum(s.night_run_length for s in scheduled) == len(records)


def test_empty_aggregate():
    assert aggregate([]) == []
    assert aggregate([EnumerationResult()]) == []


def test_group_by_night():
    scheduled = aggregate([_result(_record("A", 1.0, D1), _record("B", 1.1, D1), _record("A", 2.0, D2))])
    groups = group_by_night(scheduled)
    assert [night for night, _ in groups] == [D1, D2]
    assert [len(items) for _, items in groups] == [2, 1]
