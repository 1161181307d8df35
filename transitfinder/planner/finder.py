import logging
import math
import time
from typing import Sequence

from transitfinder.errors import InputError
from .aggregate import aggregate
from .anytime import check_anytime
from .astro import GeometryProvider
from .constraints import build_constraints
from .events import EnumerationResult, EventContext, enumerate_events
from .filters import filter_targets
from .providers import TargetProvider, get_target_provider
from .sun_events import DEFAULT_MARGIN_DAYS, build_sun_event_set
from .types import (
    AnyTimeRecord,
    ConstraintBundle,
    FinderResult,
    ManualSite,
    NamedObservatory,
    SiteSelection,
    Target,
    TargetIssue,
)

logger = logging.getLogger(__name__)

DEFAULT_TIME_BUDGET_S = 120.0
MAX_DURATION_HOURS = 48.0


class TransitFinder:
    def __init__(self, config, provider: TargetProvider | None = None):
        self._config = config
        self._provider = provider

    def find(
        self,
        constraints: ConstraintBundle | None = None,
        targets: Sequence[Target] | None = None,
        do_secondary: bool = False,
    ) -> FinderResult:
        constraints = constraints or self.default_constraints(self._config)
        issues: list[TargetIssue] = []
        if targets is None:
            target_list = self._load_targets()
            targets = list(target_list.targets)
            issues.extend(target_list.issues)

        kept, n_filtered = filter_targets(targets, constraints)
        logger.info(
            f"Searching {len(kept)} targets ({n_filtered} filtered out) at "
            f"{constraints.site.name} for {constraints.days_forward:g} days"
        )

        geometry = GeometryProvider(
            latitude_deg=constraints.site.latitude_deg,
            longitude_deg=constraints.site.longitude_deg,
        )
        sun_events = build_sun_event_set(
            geometry,
            constraints.window_first_jd,
            constraints.window_end_jd,
            constraints.twilight_deg,
            margin_days=DEFAULT_MARGIN_DAYS + (MAX_DURATION_HOURS / 2 + constraints.baseline_hours) / 24.0,
        )

        budget_s = float(getattr(self._config, "time_budget_s", DEFAULT_TIME_BUDGET_S))
        deadline = time.monotonic() + budget_s
        results: list[EnumerationResult] = []
        anytime: list[AnyTimeRecord] = []
        rejection = _RejectionStats()

        for index, target in enumerate(kept):
            if time.monotonic() > deadline:
                remaining = kept[index:]
                logger.warning(
                    f"Time budget of {budget_s:g} s exhausted; "
                    f"{len(remaining)} targets not evaluated"
                )
                issues.extend(
                    TargetIssue(
                        name=t.name,
                        kind="skipped",
                        message=f"not evaluated within the {budget_s:g} s time budget",
                        line_number=t.line_number,
                    )
                    for t in remaining
                )
                break

            if target.observation_type.is_periodic:
                issue = _check_ephemeris(target)
                if issue is not None:
                    issues.append(issue)
                else:
                    result = enumerate_events(
                        EventContext(target=target, constraints=constraints, sun_events=sun_events),
                        geometry,
                        do_secondary=do_secondary,
                    )
                    if not result.records:
                        rejection.no_events += 1
                    results.append(result)

            if target.observation_type.is_anytime:
                record = check_anytime(target, constraints, sun_events, geometry)
                if record is None:
                    rejection.too_low += 1
                else:
                    anytime.append(record)

        events = aggregate(results)
        anytime.sort(key=lambda r: r.max_elevation_jd)
        logger.info(f"Found {len(events)} observable events and {len(anytime)} any-time targets")

        message = None
        if not events and not anytime:
            message = _build_no_event_message(rejection, constraints, len(kept), issues)

        return FinderResult(
            constraints=constraints,
            events=events,
            anytime=anytime,
            issues=issues,
            targets_considered=len(kept),
            targets_filtered=n_filtered,
            message=message,
        )

    @staticmethod
    def default_constraints(config, **overrides) -> ConstraintBundle:
        overrides = {k: v for k, v in overrides.items() if v is not None}
        site = overrides.pop("site", None) or site_selection_from_config(config)
        values = constraint_values_from_config(config)
        values.update(overrides)
        return build_constraints(site=site, **values)

    def _load_targets(self):
        provider = self._provider
        if provider is None:
            path = self._config.targets_path
            if path is None:
                raise InputError("No target list given (set [targets] path or pass --targets)")
            provider = get_target_provider(path)
        return provider.list_targets()


def constraint_values_from_config(config) -> dict:
    return {
        "days_forward": config.days_forward,
        "days_backward": config.days_backward,
        "min_mid_elevation_deg": config.min_mid_elevation_deg,
        "min_start_end_elevation_deg": config.min_start_end_elevation_deg,
        "min_hour_angle": config.min_hour_angle,
        "max_hour_angle": config.max_hour_angle,
        "baseline_hours": config.baseline_hours,
        "twilight_deg": config.twilight_deg,
        "min_priority": config.min_priority,
        "min_depth_ppt": config.min_depth_ppt,
        "max_magnitude": config.max_magnitude,
        "name_pattern": config.name_pattern,
    }


def site_selection_from_config(config) -> SiteSelection:
    if config.site_observatory:
        return NamedObservatory(name=config.site_observatory)
    if config.site_latitude_deg is None or config.site_longitude_deg is None:
        raise InputError(
            "Observer site is required: set [site] observatory or latitude_deg/longitude_deg"
        )
    return ManualSite(
        latitude_deg=config.site_latitude_deg,
        longitude_deg=config.site_longitude_deg,
        timezone=config.site_timezone,
        name=config.site_name,
    )


def _check_ephemeris(target: Target) -> TargetIssue | None:
    ephemeris = target.ephemeris
    if ephemeris is None:
        return TargetIssue(
            name=target.name,
            kind="incomplete",
            message="epoch, period or duration missing",
            line_number=target.line_number,
        )
    values = (ephemeris.epoch_jd, ephemeris.period_days, ephemeris.duration_hours)
    if not all(math.isfinite(value) for value in values):
        return TargetIssue(
            name=target.name,
            kind="invalid",
            message="epoch, period and duration must be finite numbers",
            line_number=target.line_number,
        )
    if ephemeris.period_days <= 0:
        return TargetIssue(
            name=target.name,
            kind="invalid",
            message=f"period must be positive, got {ephemeris.period_days:g}",
            line_number=target.line_number,
        )
    if not 0 < ephemeris.duration_hours <= MAX_DURATION_HOURS:
        return TargetIssue(
            name=target.name,
            kind="invalid",
            message=f"duration must be in (0, {MAX_DURATION_HOURS:g}] hours, got {ephemeris.duration_hours:g}",
            line_number=target.line_number,
        )
    return None


class _RejectionStats:
    def __init__(self) -> None:
        self.no_events = 0
        self.too_low = 0


def _build_no_event_message(
    rejection: _RejectionStats,
    constraints: ConstraintBundle,
    n_targets: int,
    issues: Sequence[TargetIssue],
) -> str:
    parts = ["No observable events in this window."]
    if n_targets == 0:
        parts.append("No targets passed the filters.")
    if rejection.no_events > 0:
        parts.append(
            f"{rejection.no_events} periodic targets had no event with mid-point above "
            f"{constraints.min_mid_elevation_deg:.0f}° and ingress or egress above "
            f"{constraints.min_start_end_elevation_deg:.0f}°."
        )
    if rejection.too_low > 0:
        parts.append(
            f"{rejection.too_low} any-time targets never reached "
            f"{constraints.min_mid_elevation_deg:.0f}° on the first night."
        )
    if constraints.days_forward < 1:
        parts.append("Try a longer window.")
    unusable = sum(1 for issue in issues if issue.kind != "skipped")
    if unusable:
        parts.append(f"{unusable} targets could not be used; see the issues list.")
    return " ".join(parts)
