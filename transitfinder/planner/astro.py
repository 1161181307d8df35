"""Low-precision Sun, Moon and fixed-target geometry for an observing site.

Instants are Julian Dates (UTC) throughout. The position functions accept
either floats or numpy arrays of JDs, so the same code serves single lookups
and sampled curves.
"""

from dataclasses import dataclass
import datetime
import math

import numpy as np

J2000_JD = 2451545.0
SUN = "sun"
MOON = "moon"

# Rise/set search: coarse scan step and bisection tolerance, in days.
RISE_SET_SCAN_DAYS = 10.0 / 1440.0
RISE_SET_TOLERANCE_DAYS = 0.5 / 86400.0
DEFAULT_MAX_SEARCH_DAYS = 1.5

_J2000_UTC = datetime.datetime(2000, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)


def datetime_to_jd(dt: datetime.datetime) -> float:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    dt = dt.astimezone(datetime.timezone.utc)
    year = dt.year
    month = dt.month
    seconds = dt.second + dt.microsecond / 1e6
    day = dt.day + (dt.hour + (dt.minute + seconds / 60.0) / 60.0) / 24.0
    if month <= 2:
        year -= 1
        month += 12
    a = math.floor(year / 100)
    b = 2 - a + math.floor(a / 4)
    jd = math.floor(365.25 * (year + 4716)) + math.floor(30.6001 * (month + 1)) + day + b - 1524.5
    return jd


def jd_to_datetime(jd: float, tz: datetime.tzinfo | None = None) -> datetime.datetime:
    delta = datetime.timedelta(microseconds=round((float(jd) - J2000_JD) * 86400e6))
    dt = _J2000_UTC + delta
    if tz is not None:
        dt = dt.astimezone(tz)
    return dt


def gmst_deg(jd):
    d = jd - J2000_JD
    return np.mod((18.697374558 + 24.06570982441908 * d) * 15.0, 360.0)


def local_sidereal_deg(jd, longitude_deg: float):
    return np.mod(gmst_deg(jd) + longitude_deg, 360.0)


def hour_angle_hours(ra_deg, longitude_deg: float, jd):
    """Hour angle in hours, normalised to [-12, 12)."""
    ha_hours = (local_sidereal_deg(jd, longitude_deg) - ra_deg) / 15.0
    return np.mod(ha_hours + 12.0, 24.0) - 12.0


def alt_az_deg(ra_deg, dec_deg, latitude_deg: float, longitude_deg: float, jd):
    """Altitude and azimuth (north through east) in degrees."""
    ha = np.radians(hour_angle_hours(ra_deg, longitude_deg, jd) * 15.0)
    dec = np.radians(dec_deg)
    lat = math.radians(latitude_deg)
    sin_alt = np.sin(dec) * math.sin(lat) + np.cos(dec) * math.cos(lat) * np.cos(ha)
    alt = np.arcsin(np.clip(sin_alt, -1.0, 1.0))
    az = np.arctan2(
        -np.cos(dec) * np.sin(ha),
        np.sin(dec) * math.cos(lat) - np.cos(dec) * np.cos(ha) * math.sin(lat),
    )
    return np.degrees(alt), np.mod(np.degrees(az), 360.0)


def sun_ra_dec_deg(jd):
    n = jd - J2000_JD
    l = np.radians(np.mod(280.460 + 0.9856474 * n, 360.0))
    g = np.radians(np.mod(357.528 + 0.9856003 * n, 360.0))
    lam = l + math.radians(1.915) * np.sin(g) + math.radians(0.020) * np.sin(2 * g)
    eps = np.radians(23.439 - 0.0000004 * n)
    ra = np.arctan2(np.cos(eps) * np.sin(lam), np.cos(lam))
    dec = np.arcsin(np.sin(eps) * np.sin(lam))
    return np.mod(np.degrees(ra), 360.0), np.degrees(dec)


def moon_ra_dec_deg(jd):
    n = jd - J2000_JD
    l = np.radians(np.mod(218.316 + 13.176396 * n, 360.0))
    m = np.radians(np.mod(134.963 + 13.064993 * n, 360.0))
    f = np.radians(np.mod(93.272 + 13.229350 * n, 360.0))
    lam = l + math.radians(6.289) * np.sin(m)
    beta = math.radians(5.128) * np.sin(f)
    eps = np.radians(23.439 - 0.0000004 * n)
    sin_dec = np.sin(beta) * np.cos(eps) + np.cos(beta) * np.sin(eps) * np.sin(lam)
    dec = np.arcsin(np.clip(sin_dec, -1.0, 1.0))
    y = np.sin(lam) * np.cos(eps) - np.tan(beta) * np.sin(eps)
    x = np.cos(lam)
    ra = np.arctan2(y, x)
    return np.mod(np.degrees(ra), 360.0), np.degrees(dec)


def angular_separation_deg(ra1_deg, dec1_deg, ra2_deg, dec2_deg):
    ra1, dec1, ra2, dec2 = (np.radians(v) for v in (ra1_deg, dec1_deg, ra2_deg, dec2_deg))
    cos_sep = np.sin(dec1) * np.sin(dec2) + np.cos(dec1) * np.cos(dec2) * np.cos(ra1 - ra2)
    return np.degrees(np.arccos(np.clip(cos_sep, -1.0, 1.0)))


def moon_illumination_fraction(jd):
    ra_sun, dec_sun = sun_ra_dec_deg(jd)
    ra_moon, dec_moon = moon_ra_dec_deg(jd)
    elong = np.radians(angular_separation_deg(ra_sun, dec_sun, ra_moon, dec_moon))
    return (1.0 - np.cos(elong)) / 2.0


@dataclass(frozen=True)
class HorizontalPosition:
    elevation_deg: float
    azimuth_deg: float
    hour_angle_hours: float


class GeometryProvider:
    """Site-bound geometry: positions of the Sun, the Moon and fixed targets.

    ``body`` is ``SUN``, ``MOON`` or any object with ``ra_deg``/``dec_deg``
    attributes (such as a ``Target``).
    """

    def __init__(
        self,
        latitude_deg: float,
        longitude_deg: float,
        max_search_days: float = DEFAULT_MAX_SEARCH_DAYS,
    ) -> None:
        self.latitude_deg = latitude_deg
        self.longitude_deg = longitude_deg
        self.max_search_days = max_search_days

    def radec(self, body, jd):
        if body == SUN:
            return sun_ra_dec_deg(jd)
        if body == MOON:
            return moon_ra_dec_deg(jd)
        return body.ra_deg, body.dec_deg

    def elevation(self, body, jd):
        ra, dec = self.radec(body, jd)
        alt, _ = alt_az_deg(ra, dec, self.latitude_deg, self.longitude_deg, jd)
        return alt

    def azimuth(self, body, jd):
        ra, dec = self.radec(body, jd)
        _, az = alt_az_deg(ra, dec, self.latitude_deg, self.longitude_deg, jd)
        return az

    def hour_angle(self, body, jd):
        ra, _ = self.radec(body, jd)
        return hour_angle_hours(ra, self.longitude_deg, jd)

    def horizontal(self, body, jd: float) -> HorizontalPosition:
        ra, dec = self.radec(body, jd)
        alt, az = alt_az_deg(ra, dec, self.latitude_deg, self.longitude_deg, jd)
        ha = hour_angle_hours(ra, self.longitude_deg, jd)
        return HorizontalPosition(
            elevation_deg=float(alt),
            azimuth_deg=float(az),
            hour_angle_hours=float(ha),
        )

    def next_rise(self, body, horizon_deg: float, after_jd: float) -> float | None:
        return self._next_crossing(body, horizon_deg, after_jd, rising=True)

    def next_set(self, body, horizon_deg: float, after_jd: float) -> float | None:
        return self._next_crossing(body, horizon_deg, after_jd, rising=False)

    def _next_crossing(
        self,
        body,
        horizon_deg: float,
        after_jd: float,
        rising: bool,
    ) -> float | None:
        steps = math.ceil(self.max_search_days / RISE_SET_SCAN_DAYS)
        grid = after_jd + RISE_SET_SCAN_DAYS * np.arange(steps + 1)
        above = self.elevation(body, grid) >= horizon_deg
        if rising:
            hits = np.nonzero(~above[:-1] & above[1:])[0]
        else:
            hits = np.nonzero(above[:-1] & ~above[1:])[0]
        if hits.size == 0:
            return None
        lo = float(grid[hits[0]])
        hi = float(grid[hits[0] + 1])
        while hi - lo > RISE_SET_TOLERANCE_DAYS:
            mid = (lo + hi) / 2.0
            mid_above = self.elevation(body, mid) >= horizon_deg
            if mid_above == rising:
                hi = mid
            else:
                lo = mid
        return hi
