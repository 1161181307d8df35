from dataclasses import dataclass, field
import datetime
import enum
import math
from typing import Optional, Sequence

from dateutil import tz


class ObservationType(enum.IntEnum):
    PERIODIC = 1
    ANYTIME = 2
    BOTH = 3

    @property
    def is_periodic(self) -> bool:
        return self in (ObservationType.PERIODIC, ObservationType.BOTH)

    @property
    def is_anytime(self) -> bool:
        return self in (ObservationType.ANYTIME, ObservationType.BOTH)


@dataclass(frozen=True)
class Ephemeris:
    epoch_jd: float
    period_days: float
    duration_hours: float
    epoch_uncertainty_days: float | None = None
    period_uncertainty_days: float | None = None

    @property
    def half_width_hours(self) -> float:
        return self.duration_hours / 2.0

    def timing_uncertainty_days(self, cycle: int) -> float | None:
        if self.epoch_uncertainty_days is None or self.period_uncertainty_days is None:
            return None
        return math.sqrt(
            self.epoch_uncertainty_days**2 + (cycle * self.period_uncertainty_days) ** 2
        )


@dataclass(frozen=True)
class Target:
    name: str
    ra_deg: float
    dec_deg: float
    ephemeris: Ephemeris | None = None
    magnitude: float | None = None
    depth_ppt: float | None = None
    priority: int | None = None
    comments: str = ""
    observation_type: ObservationType = ObservationType.PERIODIC
    line_number: int | None = None


@dataclass(frozen=True)
class Site:
    name: str
    latitude_deg: float
    longitude_deg: float
    timezone: str = "UTC"

    @property
    def tzinfo(self) -> datetime.tzinfo:
        return tz.gettz(self.timezone)

    @property
    def night_label_offset_hours(self) -> int:
        return round(self.longitude_deg * 24.0 / 360.0)


@dataclass(frozen=True)
class NamedObservatory:
    name: str


@dataclass(frozen=True)
class ManualSite:
    latitude_deg: float
    longitude_deg: float
    timezone: str = "UTC"
    name: str | None = None


SiteSelection = NamedObservatory | ManualSite


@dataclass(frozen=True)
class ConstraintBundle:
    site: Site
    window_start_jd: float
    days_forward: float
    days_backward: float
    min_mid_elevation_deg: float
    min_start_end_elevation_deg: float
    min_hour_angle: float = -12.0
    max_hour_angle: float = 12.0
    baseline_hours: float = 0.0
    twilight_deg: float = -12.0
    min_priority: int | None = None
    min_depth_ppt: float | None = None
    max_magnitude: float | None = None
    name_pattern: str | None = None

    @property
    def window_first_jd(self) -> float:
        return self.window_start_jd - self.days_backward

    @property
    def window_end_jd(self) -> float:
        return self.window_start_jd + self.days_forward

    @property
    def tzinfo(self) -> datetime.tzinfo:
        return self.site.tzinfo


@dataclass(frozen=True)
class EventPoint:
    jd: float
    utc: datetime.datetime
    local: datetime.datetime
    elevation_deg: float
    azimuth_deg: float
    hour_angle_hours: float
    is_daytime: bool
    elevation_ok: bool


@dataclass(frozen=True)
class EventRecord:
    target: Target
    cycle: int
    start: EventPoint
    mid: EventPoint
    end: EventPoint
    starts_before_sunset: bool
    middle_in_daytime: bool
    ends_after_sunrise: bool
    night: datetime.date
    sunset_jd: float
    sunrise_jd: float
    moon_separation_deg: float
    moon_illumination: float
    secondary: bool = False
    pre: EventPoint | None = None
    post: EventPoint | None = None
    timing_uncertainty_minutes: float | None = None

    @property
    def jd(self) -> float:
        return self.mid.jd


@dataclass(frozen=True)
class AnyTimeRecord:
    target: Target
    night: datetime.date
    sunset_jd: float
    sunrise_jd: float
    max_elevation_deg: float
    max_elevation_jd: float
    max_elevation_utc: datetime.datetime
    max_elevation_local: datetime.datetime
    azimuth_deg: float
    hour_angle_hours: float


@dataclass(frozen=True)
class ScheduledEvent:
    record: EventRecord
    night_run_length: int


@dataclass(frozen=True)
class TargetIssue:
    name: str
    kind: str
    message: str
    line_number: int | None = None


@dataclass
class TargetList:
    targets: Sequence[Target]
    issues: Sequence[TargetIssue] = field(default_factory=list)


@dataclass
class FinderResult:
    constraints: ConstraintBundle
    events: Sequence[ScheduledEvent]
    anytime: Sequence[AnyTimeRecord]
    issues: Sequence[TargetIssue] = field(default_factory=list)
    targets_considered: int = 0
    targets_filtered: int = 0
    message: Optional[str] = None
