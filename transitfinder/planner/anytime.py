"""Observability of targets that can be observed at any time (no ephemeris).

Only the single night following the window start is examined, unlike the
periodic path which walks the whole window. With no night left in the
precomputed range there is nothing to observe.
"""

import math

import numpy as np

from .astro import GeometryProvider, jd_to_datetime
from .sun_events import SunEventSet, night_label
from .types import AnyTimeRecord, ConstraintBundle, Target

ANYTIME_STEP_MINUTES = 10.0


def night_grid(sunset_jd: float, sunrise_jd: float, step_minutes: float = ANYTIME_STEP_MINUTES) -> np.ndarray:
    step = step_minutes / 1440.0
    count = max(1, math.ceil((sunrise_jd - sunset_jd) / step))
    grid = sunset_jd + step * np.arange(count)
    return np.append(grid[grid < sunrise_jd], sunrise_jd)


def check_anytime(
    target: Target,
    constraints: ConstraintBundle,
    sun_events: SunEventSet,
    geometry: GeometryProvider,
) -> AnyTimeRecord | None:
    night = sun_events.first_night_after(constraints.window_start_jd)
    if night is None:
        return None
    sunset_jd, sunrise_jd = night

    grid = night_grid(sunset_jd, sunrise_jd)
    elevations = geometry.elevation(target, grid)
    best = int(np.argmax(elevations))
    max_elevation = float(elevations[best])
    if max_elevation < constraints.min_mid_elevation_deg:
        return None

    best_jd = float(grid[best])
    position = geometry.horizontal(target, best_jd)
    utc = jd_to_datetime(best_jd)
    return AnyTimeRecord(
        target=target,
        night=night_label(sunset_jd, constraints.site),
        sunset_jd=sunset_jd,
        sunrise_jd=sunrise_jd,
        max_elevation_deg=max_elevation,
        max_elevation_jd=best_jd,
        max_elevation_utc=utc,
        max_elevation_local=utc.astimezone(constraints.tzinfo),
        azimuth_deg=position.azimuth_deg,
        hour_angle_hours=position.hour_angle_hours,
    )
