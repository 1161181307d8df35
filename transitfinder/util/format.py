import datetime
from typing import Tuple

import astropy.units as u
from astropy.coordinates import Angle

from transitfinder.errors import InputError


def _wrap_hours(hours: float) -> float:
    return hours % 24.0


def _split_dms(angle_deg: float, precision: int) -> Tuple[int, int, int, float]:
    sign = -1 if angle_deg < 0 else 1
    a = abs(angle_deg)
    total_seconds = round(a * 3600.0, precision)
    deg = int(total_seconds // 3600)
    rem = total_seconds - deg * 3600
    minutes = int(rem // 60)
    seconds = rem - minutes * 60
    return sign, deg, minutes, seconds


def _split_hms(hours: float, precision: int) -> Tuple[int, int, float]:
    h = _wrap_hours(hours)
    total_seconds = round(h * 3600.0, precision) % (24.0 * 3600.0)
    hours_int = int(total_seconds // 3600)
    rem = total_seconds - hours_int * 3600
    minutes = int(rem // 60)
    seconds = rem - minutes * 60
    return hours_int, minutes, seconds


def deg_to_hms(ra_deg: float, precision: int = 2) -> str:
    h, m, s = _split_hms(ra_deg / 15.0, precision)
    s_fmt = f"{s:0{3 + precision}.{precision}f}"
    return f"{h:02d}:{m:02d}:{s_fmt}"


def deg_to_dms(dec_deg: float, precision: int = 1) -> str:
    sign_val, d, m, s = _split_dms(dec_deg, precision)
    sign = "-" if sign_val < 0 else "+"
    s_fmt = f"{s:0{3 + precision}.{precision}f}"
    return f"{sign}{d:02d}:{m:02d}:{s_fmt}"


def format_hour_angle(hours: float) -> str:
    """Signed hours and minutes, e.g. ``-01:05``."""
    sign = "-" if hours < 0 else "+"
    total_minutes = round(abs(hours) * 60.0)
    return f"{sign}{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def round_to_minute(dt: datetime.datetime) -> datetime.datetime:
    base = dt.replace(second=0, microsecond=0)
    if dt - base >= datetime.timedelta(seconds=30):
        base += datetime.timedelta(minutes=1)
    return base


def format_clock(dt: datetime.datetime) -> str:
    return round_to_minute(dt).strftime("%H:%M")


def parse_ra_deg(value: str) -> float:
    """Parse a right ascension given as sexagesimal or decimal hours."""
    text = value.strip()
    if not text:
        raise InputError("Right ascension is empty")
    try:
        ra_deg = Angle(text, unit=u.hourangle).degree
    except (ValueError, TypeError) as e:
        raise InputError(f"Cannot parse right ascension {value!r}: {e}") from e
    if not 0.0 <= ra_deg < 360.0:
        raise InputError(f"Right ascension out of range: {value!r}")
    return float(ra_deg)


def parse_dec_deg(value: str) -> float:
    """Parse a declination given as sexagesimal or decimal degrees."""
    text = value.strip()
    if not text:
        raise InputError("Declination is empty")
    try:
        dec_deg = Angle(text, unit=u.deg).degree
    except (ValueError, TypeError) as e:
        raise InputError(f"Cannot parse declination {value!r}: {e}") from e
    if not -90.0 <= dec_deg <= 90.0:
        raise InputError(f"Declination out of range: {value!r}")
    return float(dec_deg)
