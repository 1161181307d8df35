import datetime
import logging

import pytest

from transitfinder.errors import InputError
from transitfinder.planner.aggregate import aggregate
from transitfinder.planner.astro import GeometryProvider, datetime_to_jd
from transitfinder.planner.constraints import build_constraints
from transitfinder.planner.events import (
    MAX_EVENT_ITERATIONS,
    EventContext,
    enumerate_events,
    passes_elevation_limits,
    starting_cycle,
)
from transitfinder.planner.sun_events import build_sun_event_set
from transitfinder.planner.types import Ephemeris, Site, Target


def _target(epoch_jd, period_days, duration_hours=2.0, ra_deg=180.0, dec_deg=0.0, **ephemeris):
    return Target(
        name="T",
        ra_deg=ra_deg,
        dec_deg=dec_deg,
        ephemeris=Ephemeris(
            epoch_jd=epoch_jd,
            period_days=period_days,
            duration_hours=duration_hours,
            **ephemeris,
        ),
    )


def _run(target, constraints, sun_events, geometry, **kwargs):
    context = EventContext(target=target, constraints=constraints, sun_events=sun_events)
    return enumerate_events(context, geometry, **kwargs)


def test_starting_cycle_is_before_the_window():
    assert starting_cycle(100.0, 1.0, 100.5) == -2
    assert starting_cycle(100.0, 3.5, 90.0) == -5


def test_single_midnight_transit(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints()
    sun_events = sun_events_for(constraints)
    epoch = equinox_noon_jd - 0.5
    result = _run(_target(epoch, 1.0), constraints, sun_events, equatorial_geometry)

    assert len(result.records) == 1
    record = result.records[0]
    assert record.cycle == 1
    assert record.mid.jd == pytest.approx(epoch + 1.0)
    assert record.start.jd == pytest.approx(epoch + 1.0 - 1.0 / 24.0)
    assert record.end.jd == pytest.approx(epoch + 1.0 + 1.0 / 24.0)
    assert record.mid.elevation_deg > 85.0
    assert not (record.starts_before_sunset or record.middle_in_daytime or record.ends_after_sunrise)
    assert record.night == datetime.date(2024, 3, 20)
    assert record.sunset_jd < record.start.jd < record.end.jd < record.sunrise_jd
    assert result.jds == [record.mid.jd]


def test_daytime_events_are_skipped(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints(
        days_forward=10, min_mid_elevation_deg=-90.0, min_start_end_elevation_deg=-90.0
    )
    sun_events = sun_events_for(constraints)
    # Mid-points alternate between midnight and noon.
    result = _run(_target(equinox_noon_jd + 0.5, 3.5), constraints, sun_events, equatorial_geometry)

    assert result.candidates_evaluated == 3
    assert len(result.records) == 2
    jds = [r.mid.jd for r in result.records]
    assert jds == sorted(jds)
    assert jds[1] - jds[0] == pytest.approx(7.0)
    assert result.records[0].night != result.records[1].night


def test_every_accepted_event_meets_the_limits(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints(
        days_forward=30, min_mid_elevation_deg=40.0, min_start_end_elevation_deg=25.0
    )
    sun_events = sun_events_for(constraints)
    result = _run(
        _target(equinox_noon_jd + 0.1, 0.73, duration_hours=3.0, ra_deg=200.0, dec_deg=-10.0),
        constraints,
        sun_events,
        equatorial_geometry,
    )
    assert result.records
    for record in result.records:
        assert record.mid.elevation_deg >= 40.0
        assert max(record.start.elevation_deg, record.end.elevation_deg) >= 25.0
        assert constraints.min_hour_angle <= record.mid.hour_angle_hours <= constraints.max_hour_angle
        assert not (record.start.is_daytime and record.mid.is_daytime and record.end.is_daytime)
        assert constraints.window_first_jd < record.mid.jd <= constraints.window_end_jd


def test_hour_angle_gate(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints(days_forward=30, min_hour_angle=0.0, max_hour_angle=3.0)
    sun_events = sun_events_for(constraints)
    result = _run(
        _target(equinox_noon_jd + 0.1, 0.73, duration_hours=3.0, ra_deg=200.0),
        constraints,
        sun_events,
        equatorial_geometry,
    )
    assert result.records
    for record in result.records:
        assert 0.0 <= record.mid.hour_angle_hours <= 3.0


def test_night_label_follows_site_longitude():
    site = Site(name="Mid-Pacific", latitude_deg=20.0, longitude_deg=-150.0, timezone="UTC")
    geometry = GeometryProvider(latitude_deg=20.0, longitude_deg=-150.0)
    start = datetime.datetime(2024, 3, 20, 22, 0, tzinfo=datetime.timezone.utc)
    constraints = build_constraints(
        site,
        window_start=start,
        days_forward=2,
        min_mid_elevation_deg=-90.0,
        min_start_end_elevation_deg=-90.0,
    )
    sun_events = build_sun_event_set(
        geometry, constraints.window_first_jd, constraints.window_end_jd, constraints.twilight_deg
    )
    late_evening = datetime_to_jd(datetime.datetime(2024, 3, 21, 9, 0, tzinfo=datetime.timezone.utc))
    small_hours = datetime_to_jd(datetime.datetime(2024, 3, 21, 13, 0, tzinfo=datetime.timezone.utc))
    results = [
        _run(_target(late_evening, 1.0, duration_hours=1.0), constraints, sun_events, geometry),
        _run(_target(small_hours, 1.0, duration_hours=1.0), constraints, sun_events, geometry),
    ]
    scheduled = aggregate(results)

    assert [s.record.night for s in scheduled] == [
        datetime.date(2024, 3, 20),
        datetime.date(2024, 3, 20),
        datetime.date(2024, 3, 21),
        datetime.date(2024, 3, 21),
    ]
    assert [s.night_run_length for s in scheduled] == [2, 0, 2, 0]


def test_iteration_cap(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd, caplog):
    constraints = make_constraints(
        days_forward=100, min_mid_elevation_deg=-90.0, min_start_end_elevation_deg=-90.0
    )
    sun_events = sun_events_for(constraints)
    with caplog.at_level(logging.WARNING, logger="transitfinder.planner.events"):
        result = _run(
            _target(equinox_noon_jd, 1e-4, duration_hours=0.5), constraints, sun_events, equatorial_geometry
        )
    assert result.iterations == MAX_EVENT_ITERATIONS
    assert len(result.records) <= MAX_EVENT_ITERATIONS
    assert "stopped after" in caplog.text


def test_enumeration_is_idempotent(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints(days_forward=20, baseline_hours=1.0)
    sun_events = sun_events_for(constraints)
    target = _target(equinox_noon_jd + 0.3, 1.37, duration_hours=2.5, ra_deg=170.0, dec_deg=15.0)
    first = _run(target, constraints, sun_events, equatorial_geometry)
    second = _run(target, constraints, sun_events, equatorial_geometry)
    assert first.records == second.records
    assert first.jds == second.jds


def test_daylight_reuse_does_not_change_results(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints(
        days_forward=20, min_mid_elevation_deg=-90.0, min_start_end_elevation_deg=-90.0
    )
    sun_events = sun_events_for(constraints)
    target = _target(equinox_noon_jd + 0.3, 0.61, duration_hours=4.0)
    reused = _run(target, constraints, sun_events, equatorial_geometry, reuse_daylight=True)
    fresh = _run(target, constraints, sun_events, equatorial_geometry, reuse_daylight=False)
    assert reused.records == fresh.records


def test_baseline_points(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints(baseline_hours=1.5)
    sun_events = sun_events_for(constraints)
    result = _run(_target(equinox_noon_jd - 0.5, 1.0), constraints, sun_events, equatorial_geometry)
    record = result.records[0]
    assert record.pre.jd == pytest.approx(record.start.jd - 1.5 / 24.0)
    assert record.post.jd == pytest.approx(record.end.jd + 1.5 / 24.0)
    assert record.pre.elevation_ok and record.post.elevation_ok


def test_no_baseline_points_by_default(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints()
    sun_events = sun_events_for(constraints)
    record = _run(_target(equinox_noon_jd - 0.5, 1.0), constraints, sun_events, equatorial_geometry).records[0]
    assert record.pre is None and record.post is None


def test_secondary_eclipse_offset(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints()
    sun_events = sun_events_for(constraints)
    # Primary at noon, so the secondary falls at midnight.
    result = _run(_target(equinox_noon_jd, 1.0), constraints, sun_events, equatorial_geometry, do_secondary=True)
    assert len(result.records) == 1
    assert result.records[0].secondary
    assert result.records[0].mid.jd == pytest.approx(equinox_noon_jd + 0.5)


def test_timing_uncertainty_grows_with_cycle(make_constraints, sun_events_for, equatorial_geometry, equinox_noon_jd):
    constraints = make_constraints()
    sun_events = sun_events_for(constraints)
    target = _target(
        equinox_noon_jd - 100.5,
        1.0,
        epoch_uncertainty_days=0.001,
        period_uncertainty_days=0.0001,
    )
    record = _run(target, constraints, sun_events, equatorial_geometry).records[0]
    assert record.cycle == 101
    expected_days = (0.001**2 + (101 * 0.0001) ** 2) ** 0.5
    assert record.timing_uncertainty_minutes == pytest.approx(expected_days * 1440.0)


def test_rejects_missing_or_bad_ephemeris(make_constraints, sun_events_for, equatorial_geometry):
    constraints = make_constraints()
    sun_events = sun_events_for(constraints)
    no_ephemeris = Target(name="X", ra_deg=0.0, dec_deg=0.0)
    with pytest.raises(InputError):
        _run(no_ephemeris, constraints, sun_events, equatorial_geometry)
    with pytest.raises(InputError):
        _run(_target(2460000.0, 0.0), constraints, sun_events, equatorial_geometry)


def test_passes_elevation_limits_is_inclusive(make_constraints):
    constraints = make_constraints(min_mid_elevation_deg=30.0, min_start_end_elevation_deg=20.0)
    assert passes_elevation_limits(20.0, 30.0, 10.0, constraints)
    assert passes_elevation_limits(10.0, 30.0, 20.0, constraints)
    assert not passes_elevation_limits(19.9, 30.0, 19.9, constraints)
    assert not passes_elevation_limits(25.0, 29.9, 25.0, constraints)
