"""Validation of request parameters into an immutable ``ConstraintBundle``.

Every numeric field is treated as untrusted: values may arrive as strings
from the command line or a config file, and are range-checked here before
any geometry is computed.
"""

import datetime
import math
import re

from dateutil import parser as date_parser
from dateutil import tz

from transitfinder.errors import InputError
from .astro import datetime_to_jd
from .observatories import normalize_longitude, resolve_site
from .types import ConstraintBundle, Site, SiteSelection

TWILIGHT_ELEVATIONS_DEG = (-1.0, -6.0, -12.0, -18.0)
MAX_WINDOW_DAYS = 3660.0
MAX_BASELINE_HOURS = 24.0


def build_constraints(
    site: Site | SiteSelection,
    window_start=None,
    days_forward=7,
    days_backward=0,
    min_mid_elevation_deg=30.0,
    min_start_end_elevation_deg=20.0,
    min_hour_angle=-12.0,
    max_hour_angle=12.0,
    baseline_hours=0.0,
    twilight_deg=-12.0,
    min_priority=None,
    min_depth_ppt=None,
    max_magnitude=None,
    name_pattern=None,
) -> ConstraintBundle:
    if not isinstance(site, Site):
        site = resolve_site(site)
    site = _validate_site(site)
    tzinfo = site.tzinfo

    days_forward = _number("days_forward", days_forward, 0.0, MAX_WINDOW_DAYS)
    if days_forward <= 0:
        raise InputError("days_forward must be positive")
    days_backward = _number("days_backward", days_backward, 0.0, MAX_WINDOW_DAYS)
    min_hour_angle = _number("min_hour_angle", min_hour_angle, -12.0, 12.0)
    max_hour_angle = _number("max_hour_angle", max_hour_angle, -12.0, 12.0)
    if min_hour_angle > max_hour_angle:
        raise InputError("min_hour_angle must not exceed max_hour_angle")
    twilight_deg = _number("twilight_deg", twilight_deg, -90.0, 90.0)
    if twilight_deg not in TWILIGHT_ELEVATIONS_DEG:
        allowed = ", ".join(f"{v:g}" for v in TWILIGHT_ELEVATIONS_DEG)
        raise InputError(f"twilight_deg must be one of: {allowed}")

    if name_pattern is not None:
        name_pattern = str(name_pattern).strip() or None
    if name_pattern is not None:
        try:
            re.compile(name_pattern)
        except re.error as e:
            raise InputError(f"Invalid name pattern {name_pattern!r}: {e}") from e

    return ConstraintBundle(
        site=site,
        window_start_jd=parse_window_start(window_start, tzinfo),
        days_forward=days_forward,
        days_backward=days_backward,
        min_mid_elevation_deg=_number("min_mid_elevation_deg", min_mid_elevation_deg, -90.0, 90.0),
        min_start_end_elevation_deg=_number(
            "min_start_end_elevation_deg", min_start_end_elevation_deg, -90.0, 90.0
        ),
        min_hour_angle=min_hour_angle,
        max_hour_angle=max_hour_angle,
        baseline_hours=_number("baseline_hours", baseline_hours, 0.0, MAX_BASELINE_HOURS),
        twilight_deg=twilight_deg,
        min_priority=_optional_int("min_priority", min_priority),
        min_depth_ppt=_optional_number("min_depth_ppt", min_depth_ppt),
        max_magnitude=_optional_number("max_magnitude", max_magnitude),
        name_pattern=name_pattern,
    )


def parse_window_start(value, tzinfo: datetime.tzinfo) -> float:
    """Return the window start as a JD.

    ``None`` or ``"now"`` means the current instant. A date without a time
    means local noon at the site, so the following night is included. Naive
    date-times are taken to be in the site's time zone.
    """
    if value is None:
        return datetime_to_jd(datetime.datetime.now(datetime.timezone.utc))
    if isinstance(value, (int, float)):
        return _number("window_start", value, 0.0, math.inf)
    if isinstance(value, datetime.datetime):
        dt = value
    elif isinstance(value, datetime.date):
        dt = datetime.datetime(value.year, value.month, value.day, 12, 0)
    else:
        text = str(value).strip()
        if text.lower() in ("", "now"):
            return datetime_to_jd(datetime.datetime.now(datetime.timezone.utc))
        if text.lower() == "today":
            today = datetime.datetime.now(tzinfo).date()
            dt = datetime.datetime(today.year, today.month, today.day, 12, 0)
        else:
            try:
                dt = date_parser.parse(text, default=datetime.datetime(2000, 1, 1, 12, 0))
            except (ValueError, OverflowError) as e:
                raise InputError(f"Cannot parse start date {text!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tzinfo)
    return datetime_to_jd(dt)


def _validate_site(site: Site) -> Site:
    latitude = _number("latitude_deg", site.latitude_deg, -90.0, 90.0)
    longitude = _number("longitude_deg", site.longitude_deg, -360.0, 360.0)
    if not site.timezone or tz.gettz(site.timezone) is None:
        raise InputError(f"Unknown time zone: {site.timezone!r}")
    return Site(
        name=site.name,
        latitude_deg=latitude,
        longitude_deg=normalize_longitude(longitude),
        timezone=site.timezone,
    )


def _number(name: str, value, lo: float, hi: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InputError(f"{name} must be a number, got {value!r}") from e
    if math.isnan(number) or not lo <= number <= hi:
        raise InputError(f"{name} out of range [{lo:g}, {hi:g}]: {value!r}")
    return number


def _optional_number(name: str, value) -> float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return _number(name, value, -math.inf, math.inf)


def _optional_int(name: str, value) -> int | None:
    number = _optional_number(name, value)
    if number is None:
        return None
    if not number.is_integer():
        raise InputError(f"{name} must be an integer, got {value!r}")
    return int(number)
