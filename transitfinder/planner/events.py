"""Enumeration of observable periodic events (transits, eclipses) for one target."""

from dataclasses import dataclass, field
import datetime
import logging
import math

from transitfinder.errors import InputError
from .astro import (
    MOON,
    GeometryProvider,
    angular_separation_deg,
    jd_to_datetime,
    moon_illumination_fraction,
)
from .sun_events import DaylightState, SunEventSet, classify_daylight, night_label
from .types import ConstraintBundle, EventPoint, EventRecord, Target

logger = logging.getLogger(__name__)

MAX_EVENT_ITERATIONS = 2000
# Periods subtracted from the shifted epoch so enumeration starts safely
# before the window.
EPOCH_SAFETY_PERIODS = 2


@dataclass(frozen=True)
class EventContext:
    target: Target
    constraints: ConstraintBundle
    sun_events: SunEventSet


@dataclass
class EnumerationResult:
    records: list[EventRecord] = field(default_factory=list)
    jds: list[float] = field(default_factory=list)
    iterations: int = 0
    candidates_evaluated: int = 0


def starting_cycle(epoch_jd: float, period_days: float, first_jd: float) -> int:
    return math.floor((first_jd - epoch_jd) / period_days) - EPOCH_SAFETY_PERIODS


def enumerate_events(
    context: EventContext,
    geometry: GeometryProvider,
    do_secondary: bool = False,
    reuse_daylight: bool = True,
) -> EnumerationResult:
    target = context.target
    constraints = context.constraints
    ephemeris = target.ephemeris
    if ephemeris is None:
        raise InputError(f"{target.name}: no ephemeris")
    if not math.isfinite(ephemeris.epoch_jd) or not math.isfinite(ephemeris.period_days):
        raise InputError(f"{target.name}: epoch and period must be finite")
    if ephemeris.period_days <= 0:
        raise InputError(f"{target.name}: period must be positive, got {ephemeris.period_days}")

    cycle0 = starting_cycle(ephemeris.epoch_jd, ephemeris.period_days, constraints.window_first_jd)
    new_epoch = ephemeris.epoch_jd + cycle0 * ephemeris.period_days
    offset = ephemeris.period_days / 2.0 if do_secondary else 0.0

    result = EnumerationResult()
    for index in range(MAX_EVENT_ITERATIONS):
        result.iterations = index + 1
        mid_jd = new_epoch + ephemeris.period_days * index + offset
        if mid_jd > constraints.window_end_jd:
            break
        if mid_jd <= constraints.window_first_jd:
            continue
        result.candidates_evaluated += 1
        record = _evaluate_candidate(
            context,
            geometry,
            cycle=cycle0 + index,
            mid_jd=mid_jd,
            secondary=do_secondary,
            reuse_daylight=reuse_daylight,
        )
        if record is not None:
            result.records.append(record)
            result.jds.append(mid_jd)
    else:
        logger.warning(
            f"{target.name}: stopped after {MAX_EVENT_ITERATIONS} events "
            "before reaching the end of the window"
        )

    logger.debug(
        f"{target.name}: {len(result.records)} of {result.candidates_evaluated} "
        "candidate events observable"
    )
    return result


def passes_elevation_limits(
    start_elevation_deg: float,
    mid_elevation_deg: float,
    end_elevation_deg: float,
    constraints: ConstraintBundle,
) -> bool:
    ingress_or_egress = (
        start_elevation_deg >= constraints.min_start_end_elevation_deg
        or end_elevation_deg >= constraints.min_start_end_elevation_deg
    )
    return ingress_or_egress and mid_elevation_deg >= constraints.min_mid_elevation_deg


def _evaluate_candidate(
    context: EventContext,
    geometry: GeometryProvider,
    cycle: int,
    mid_jd: float,
    secondary: bool,
    reuse_daylight: bool,
) -> EventRecord | None:
    target = context.target
    constraints = context.constraints
    sun_events = context.sun_events
    ephemeris = target.ephemeris
    half_width = ephemeris.half_width_hours / 24.0
    start_jd = mid_jd - half_width
    end_jd = mid_jd + half_width

    start_state, mid_state, end_state = classify_daylight(
        sun_events, (start_jd, mid_jd, end_jd), reuse=reuse_daylight
    )
    if start_state.is_daytime and mid_state.is_daytime and end_state.is_daytime:
        return None

    start_pos = geometry.horizontal(target, start_jd)
    mid_pos = geometry.horizontal(target, mid_jd)
    end_pos = geometry.horizontal(target, end_jd)
    if not passes_elevation_limits(
        start_pos.elevation_deg, mid_pos.elevation_deg, end_pos.elevation_deg, constraints
    ):
        return None
    if not constraints.min_hour_angle <= mid_pos.hour_angle_hours <= constraints.max_hour_angle:
        return None

    sunset_jd, sunrise_jd = _night_bounds(sun_events, mid_jd, start_state, mid_state, end_state)

    tzinfo = constraints.tzinfo
    min_edge = constraints.min_start_end_elevation_deg
    pre = post = None
    if constraints.baseline_hours > 0:
        baseline = constraints.baseline_hours / 24.0
        pre = _baseline_point(geometry, sun_events, target, start_jd - baseline, min_edge, tzinfo)
        post = _baseline_point(geometry, sun_events, target, end_jd + baseline, min_edge, tzinfo)

    moon_ra, moon_dec = geometry.radec(MOON, mid_jd)
    uncertainty = ephemeris.timing_uncertainty_days(cycle)

    return EventRecord(
        target=target,
        cycle=cycle,
        secondary=secondary,
        start=_event_point(start_jd, start_pos, start_state, min_edge, tzinfo),
        mid=_event_point(mid_jd, mid_pos, mid_state, constraints.min_mid_elevation_deg, tzinfo),
        end=_event_point(end_jd, end_pos, end_state, min_edge, tzinfo),
        pre=pre,
        post=post,
        starts_before_sunset=start_state.is_daytime,
        middle_in_daytime=mid_state.is_daytime,
        ends_after_sunrise=end_state.is_daytime,
        night=night_label(sunset_jd, constraints.site),
        sunset_jd=sunset_jd,
        sunrise_jd=sunrise_jd,
        moon_separation_deg=float(
            angular_separation_deg(target.ra_deg, target.dec_deg, moon_ra, moon_dec)
        ),
        moon_illumination=float(moon_illumination_fraction(mid_jd)),
        timing_uncertainty_minutes=None if uncertainty is None else uncertainty * 1440.0,
    )


def _event_point(
    jd: float,
    position,
    state: DaylightState,
    min_elevation_deg: float,
    tzinfo: datetime.tzinfo,
) -> EventPoint:
    utc = jd_to_datetime(jd)
    return EventPoint(
        jd=jd,
        utc=utc,
        local=utc.astimezone(tzinfo),
        elevation_deg=position.elevation_deg,
        azimuth_deg=position.azimuth_deg,
        hour_angle_hours=position.hour_angle_hours,
        is_daytime=state.is_daytime,
        elevation_ok=position.elevation_deg >= min_elevation_deg,
    )


def _baseline_point(
    geometry: GeometryProvider,
    sun_events: SunEventSet,
    target: Target,
    jd: float,
    min_elevation_deg: float,
    tzinfo: datetime.tzinfo,
) -> EventPoint:
    return _event_point(
        jd,
        geometry.horizontal(target, jd),
        sun_events.lookup(jd),
        min_elevation_deg,
        tzinfo,
    )


def _night_bounds(
    sun_events: SunEventSet,
    mid_jd: float,
    start_state: DaylightState,
    mid_state: DaylightState,
    end_state: DaylightState,
) -> tuple[float, float]:
    """Sunset and sunrise of the night an event overlaps.

    A night whose sunset or sunrise falls outside the precomputed range is
    clipped to the range edge.
    """
    if start_state.is_daytime and mid_state.is_daytime:
        sunset_jd = sun_events.find_next("sunset", mid_jd)
    else:
        sunset_jd = sun_events.find_previous("sunset", mid_jd)
    if mid_state.is_daytime and end_state.is_daytime:
        sunrise_jd = sun_events.find_previous("sunrise", mid_jd)
    else:
        sunrise_jd = sun_events.find_next("sunrise", mid_jd)
    if sunset_jd is None:
        sunset_jd = sun_events.range_start_jd
    if sunrise_jd is None:
        sunrise_jd = sun_events.range_end_jd
    return sunset_jd, sunrise_jd
