"""Precomputed sunsets and sunrises for one request.

The set is built once for the whole requested window plus a margin, and then
answers "next/previous sunset/sunrise" queries by binary search instead of
repeating the rise/set search for every candidate event.
"""

import bisect
from dataclasses import dataclass
import datetime
import logging
import math
from typing import Iterable, Sequence

from transitfinder.errors import SunEventRangeError
from .astro import SUN, GeometryProvider, jd_to_datetime
from .types import Site

logger = logging.getLogger(__name__)

# Slightly under a day so the drift of sunset/sunrise from one day to the
# next can never step the cursor over an event.
SUN_EVENT_STEP_DAYS = 23.5 / 24.0
DEFAULT_MARGIN_DAYS = 2.0
DUPLICATE_TOLERANCE_DAYS = 30.0 / 1440.0


@dataclass(frozen=True)
class SunEventSet:
    """Sunsets and sunrises at the twilight elevation over a padded range.

    An instant with no later crossing inside the range keeps the state left
    by the last crossing before it, or the state at the start of the range
    when the Sun never crosses. Continuous twilight after a final sunrise
    counts as daytime.
    """

    sunsets: tuple[float, ...]
    sunrises: tuple[float, ...]
    range_start_jd: float
    range_end_jd: float
    twilight_deg: float
    starts_in_daytime: bool = True

    def next_sunset_after(self, jd: float) -> float:
        return self._next(self.sunsets, jd, "sunset")

    def next_sunrise_after(self, jd: float) -> float:
        return self._next(self.sunrises, jd, "sunrise")

    def previous_sunset_before(self, jd: float) -> float:
        return self._previous(self.sunsets, jd, "sunset")

    def previous_sunrise_before(self, jd: float) -> float:
        return self._previous(self.sunrises, jd, "sunrise")

    def find_next(self, kind: str, jd: float) -> float | None:
        self._check_range(jd, kind)
        events = self._events(kind)
        i = bisect.bisect_right(events, jd)
        return events[i] if i < len(events) else None

    def find_previous(self, kind: str, jd: float) -> float | None:
        self._check_range(jd, kind)
        events = self._events(kind)
        i = bisect.bisect_left(events, jd)
        return events[i - 1] if i > 0 else None

    def first_night_after(self, jd: float) -> tuple[float, float] | None:
        """``(sunset, sunrise)`` of the first night opening after ``jd``.

        None when the Sun stays above the twilight elevation for the rest of
        the range. A night still running at the end of the range closes at
        ``range_end_jd``.
        """
        sunset = self.find_next("sunset", jd)
        if sunset is None:
            return None
        sunrise = self.find_next("sunrise", sunset)
        return sunset, self.range_end_jd if sunrise is None else sunrise

    def is_daytime(self, jd: float) -> bool:
        return self.lookup(jd).is_daytime

    def lookup(self, jd: float) -> "DaylightState":
        next_sunset = self.find_next("sunset", jd)
        next_sunrise = self.find_next("sunrise", jd)
        if next_sunset is None and next_sunrise is None:
            is_daytime = self._last_kind_before(jd) == "sunrise"
        else:
            next_sunset = math.inf if next_sunset is None else next_sunset
            next_sunrise = math.inf if next_sunrise is None else next_sunrise
            is_daytime = next_sunset < next_sunrise
        return DaylightState(
            jd=jd,
            is_daytime=is_daytime,
            next_sunset=math.inf if next_sunset is None else next_sunset,
            next_sunrise=math.inf if next_sunrise is None else next_sunrise,
        )

    def merged(self) -> list[tuple[float, str]]:
        """All events in time order as ``(jd, "sunset" | "sunrise")``."""
        events = [(jd, "sunset") for jd in self.sunsets]
        events.extend((jd, "sunrise") for jd in self.sunrises)
        return sorted(events)

    def _events(self, kind: str) -> Sequence[float]:
        if kind == "sunset":
            return self.sunsets
        if kind == "sunrise":
            return self.sunrises
        raise ValueError(f"Unknown sun event kind: {kind!r}")

    def _last_kind_before(self, jd: float) -> str:
        last_sunset = self.find_previous("sunset", jd)
        last_sunrise = self.find_previous("sunrise", jd)
        if last_sunset is None and last_sunrise is None:
            return "sunrise" if self.starts_in_daytime else "sunset"
        if last_sunrise is None:
            return "sunset"
        if last_sunset is None:
            return "sunrise"
        return "sunrise" if last_sunrise > last_sunset else "sunset"

    def _check_range(self, jd: float, label: str) -> None:
        if not self.range_start_jd <= jd <= self.range_end_jd:
            raise SunEventRangeError(
                f"{label} lookup at JD {jd:.5f} outside precomputed range "
                f"[{self.range_start_jd:.5f}, {self.range_end_jd:.5f}]"
            )

    def _next(self, events: Sequence[float], jd: float, label: str) -> float:
        self._check_range(jd, label)
        i = bisect.bisect_right(events, jd)
        if i >= len(events):
            raise SunEventRangeError(f"No {label} after JD {jd:.5f} in precomputed range")
        return events[i]

    def _previous(self, events: Sequence[float], jd: float, label: str) -> float:
        self._check_range(jd, label)
        i = bisect.bisect_left(events, jd)
        if i == 0:
            raise SunEventRangeError(f"No {label} before JD {jd:.5f} in precomputed range")
        return events[i - 1]


@dataclass(frozen=True)
class DaylightState:
    jd: float
    is_daytime: bool
    next_sunset: float
    next_sunrise: float

    def covers(self, jd: float) -> bool:
        """True when ``jd`` lies before the next day/night transition."""
        return self.jd <= jd < min(self.next_sunset, self.next_sunrise)


def daylight_state(
    sun_events: SunEventSet,
    jd: float,
    prior: DaylightState | None = None,
) -> DaylightState:
    if prior is not None and prior.covers(jd):
        return DaylightState(
            jd=jd,
            is_daytime=prior.is_daytime,
            next_sunset=prior.next_sunset,
            next_sunrise=prior.next_sunrise,
        )
    return sun_events.lookup(jd)


def classify_daylight(
    sun_events: SunEventSet,
    instants: Iterable[float],
    reuse: bool = True,
) -> list[DaylightState]:
    """Day/night state of time-ordered instants.

    With ``reuse`` an instant that falls before the previous instant's next
    transition inherits its state without a new lookup. The answers are the
    same either way.
    """
    states: list[DaylightState] = []
    prior = None
    for jd in instants:
        state = daylight_state(sun_events, jd, prior if reuse else None)
        states.append(state)
        prior = state
    return states


def night_label(sunset_jd: float, site: Site) -> datetime.date:
    """Calendar date of the sunset opening a night, in a longitude-derived zone."""
    offset = datetime.timezone(datetime.timedelta(hours=site.night_label_offset_hours))
    return jd_to_datetime(sunset_jd, tz=offset).date()


def build_sun_event_set(
    geometry: GeometryProvider,
    first_jd: float,
    last_jd: float,
    twilight_deg: float,
    margin_days: float = DEFAULT_MARGIN_DAYS,
) -> SunEventSet:
    range_start = first_jd - margin_days
    range_end = last_jd + margin_days
    sunsets: list[float] = []
    sunrises: list[float] = []

    cursor = range_start
    while cursor <= range_end:
        sunset = geometry.next_set(SUN, twilight_deg, cursor)
        if sunset is not None:
            _insert_unique(sunsets, sunset)
        sunrise = geometry.next_rise(SUN, twilight_deg, cursor)
        if sunrise is not None:
            _insert_unique(sunrises, sunrise)
        cursor += SUN_EVENT_STEP_DAYS

    starts_in_daytime = bool(geometry.elevation(SUN, range_start) > twilight_deg)
    if not sunsets and not sunrises:
        logger.warning(
            f"The Sun does not cross {twilight_deg:g} degrees at this site during the "
            f"requested window; it is {'day' if starts_in_daytime else 'night'} throughout"
        )

    sun_events = SunEventSet(
        sunsets=tuple(sunsets),
        sunrises=tuple(sunrises),
        range_start_jd=range_start,
        range_end_jd=range_end,
        twilight_deg=twilight_deg,
        starts_in_daytime=starts_in_daytime,
    )
    check_alternation(sun_events)
    logger.debug(
        f"Built {len(sunsets)} sunsets and {len(sunrises)} sunrises "
        f"at {twilight_deg:g} deg for JD {range_start:.2f}-{range_end:.2f}"
    )
    return sun_events


def check_alternation(sun_events: SunEventSet) -> None:
    merged = sun_events.merged()
    for (_, kind), (jd, next_kind) in zip(merged, merged[1:]):
        if kind == next_kind:
            raise SunEventRangeError(
                f"Two consecutive {kind}s near JD {jd:.5f}; sun events do not alternate"
            )


def _insert_unique(events: list[float], jd: float) -> None:
    i = bisect.bisect_left(events, jd)
    if i > 0 and jd - events[i - 1] < DUPLICATE_TOLERANCE_DAYS:
        return
    if i < len(events) and events[i] - jd < DUPLICATE_TOLERANCE_DAYS:
        return
    events.insert(i, jd)
