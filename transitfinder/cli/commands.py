import datetime
import json
import logging
import math
import sys
from dataclasses import asdict
from pathlib import Path

from transitfinder.config import load_config
from transitfinder.errors import InputError, SunEventRangeError, TargetDataError
from transitfinder.planner import TransitFinder, list_observatories
from transitfinder.planner.airmass import airmass_curve, plot_airmass
from transitfinder.planner.astro import GeometryProvider, jd_to_datetime
from transitfinder.planner.formatters import (
    format_calendar_csv,
    format_html,
    format_json,
    format_text,
)
from transitfinder.planner.providers import get_target_provider
from transitfinder.planner.sun_events import build_sun_event_set
from transitfinder.planner.types import ManualSite, NamedObservatory, SiteSelection

logger = logging.getLogger(__name__)

# Hours of the curve shown either side of the night.
AIRMASS_MARGIN_HOURS = 1.0

EXIT_OK = 0
EXIT_DATA_ERROR = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERNAL_ERROR = 3


def _json_envelope(command: str, ok: bool, data=None, error=None) -> dict:
    return {
        "ok": ok,
        "command": command,
        "timestamp_utc": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "data": data,
        "error": error,
    }


def _init_logging(level: str | None) -> None:
    if not level:
        return
    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "error": logging.ERROR,
    }
    logging.basicConfig(level=level_map.get(level, logging.INFO))


def _config_path_from_args(args) -> Path | None:
    if args is None:
        return None
    path = getattr(args, "config", None)
    return Path(path) if path else None


def _handle_error(command: str, args, exc: Exception) -> int:
    if isinstance(exc, SunEventRangeError):
        code, exit_code = "internal_error", EXIT_INTERNAL_ERROR
        message = f"Internal error: {exc}"
        logger.error(message)
    elif isinstance(exc, TargetDataError):
        code, exit_code = "target_data", EXIT_DATA_ERROR
        message = str(exc)
    else:
        code, exit_code = "invalid_input", EXIT_INPUT_ERROR
        message = str(exc)

    if args is not None and getattr(args, "json", False):
        payload = _json_envelope(
            command=command,
            ok=False,
            data=None,
            error={"code": code, "message": message, "details": None},
        )
        print(json.dumps(payload, indent=2))
    else:
        print(message, file=sys.stderr)
    return exit_code


def _site_from_args(args) -> SiteSelection | None:
    observatory = getattr(args, "observatory", None)
    if observatory:
        return NamedObservatory(name=observatory)
    lat = getattr(args, "latitude_deg", None)
    lon = getattr(args, "longitude_deg", None)
    if lat is None and lon is None:
        return None
    if lat is None or lon is None:
        raise InputError("Both latitude and longitude are required when specifying a site")
    return ManualSite(
        latitude_deg=lat,
        longitude_deg=lon,
        timezone=getattr(args, "timezone", None) or "UTC",
    )


def _constraint_overrides(args) -> dict:
    return {
        "site": _site_from_args(args),
        "window_start": getattr(args, "start", None),
        "days_forward": getattr(args, "days_forward", None),
        "days_backward": getattr(args, "days_backward", None),
        "min_mid_elevation_deg": getattr(args, "min_mid_elevation", None),
        "min_start_end_elevation_deg": getattr(args, "min_start_end_elevation", None),
        "min_hour_angle": getattr(args, "min_hour_angle", None),
        "max_hour_angle": getattr(args, "max_hour_angle", None),
        "baseline_hours": getattr(args, "baseline_hours", None),
        "twilight_deg": getattr(args, "twilight", None),
        "min_priority": getattr(args, "min_priority", None),
        "min_depth_ppt": getattr(args, "min_depth", None),
        "max_magnitude": getattr(args, "max_magnitude", None),
        "name_pattern": getattr(args, "name", None),
    }


def _write_output(text: str, output: str | None) -> None:
    if output:
        Path(output).write_text(text + ("" if text.endswith("\n") else "\n"), encoding="utf-8")
        logger.info(f"Wrote {output}")
    else:
        print(text)


def run_transits(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    try:
        config = load_config(_config_path_from_args(args))
        targets_path = getattr(args, "targets", None)
        provider = get_target_provider(targets_path) if targets_path else None
        finder = TransitFinder(config, provider=provider)
        constraints = finder.default_constraints(config, **_constraint_overrides(args))
        result = finder.find(constraints=constraints, do_secondary=getattr(args, "secondary", False))
    except (ValueError, FileNotFoundError, TargetDataError, SunEventRangeError) as e:
        return _handle_error("transits", args, e)

    if getattr(args, "json", False):
        payload = _json_envelope(command="transits", ok=True, data=asdict(result), error=None)
        _write_output(json.dumps(payload, indent=2, default=str), getattr(args, "output", None))
        return EXIT_OK

    output_format = getattr(args, "format", None) or "text"
    if output_format == "json":
        text = format_json(result)
    elif output_format == "csv":
        text = format_calendar_csv(result)
    elif output_format == "html":
        text = format_html(result)
    else:
        text = format_text(result, verbose=getattr(args, "verbose", False))
    _write_output(text, getattr(args, "output", None))
    return EXIT_OK


def run_observatories(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    sites = list_observatories()
    if getattr(args, "json", False):
        payload = _json_envelope(
            command="observatories",
            ok=True,
            data=[asdict(site) for site in sites],
            error=None,
        )
        print(json.dumps(payload, indent=2))
        return EXIT_OK

    name_w = max(len(site.name) for site in sites)
    for site in sites:
        print(
            f"{site.name:<{name_w}}  {site.latitude_deg:9.4f}  {site.longitude_deg:10.4f}  {site.timezone}"
        )
    return EXIT_OK


def run_airmass(args) -> int:
    _init_logging(getattr(args, "log_level", None))
    try:
        config = load_config(_config_path_from_args(args))
        targets_path = getattr(args, "targets", None) or config.targets_path
        if targets_path is None:
            raise InputError("No target list given (set [targets] path or pass --targets)")
        target_list = get_target_provider(targets_path).list_targets()
        wanted = args.target.strip().lower()
        matches = [t for t in target_list.targets if t.name.lower() == wanted]
        if not matches:
            raise InputError(f"Target not found in {targets_path}: {args.target}")
        target = matches[0]

        constraints = TransitFinder.default_constraints(config, **_constraint_overrides(args))
        site = constraints.site
        geometry = GeometryProvider(latitude_deg=site.latitude_deg, longitude_deg=site.longitude_deg)
        sun_events = build_sun_event_set(
            geometry,
            constraints.window_start_jd,
            constraints.window_start_jd + 1.0,
            constraints.twilight_deg,
        )
        night = sun_events.first_night_after(constraints.window_start_jd)
        if night is None:
            raise InputError(
                f"No night at {constraints.twilight_deg:g} degrees begins after the start date"
            )
        sunset_jd, sunrise_jd = night
        margin = AIRMASS_MARGIN_HOURS / 24.0
        curve = airmass_curve(geometry, target, sunset_jd - margin, sunrise_jd + margin)
    except (ValueError, FileNotFoundError, TargetDataError, SunEventRangeError) as e:
        return _handle_error("airmass", args, e)

    output = getattr(args, "output", None)
    if output:
        plot_airmass(curve, Path(output), tzinfo=site.tzinfo, twilight_deg=constraints.twilight_deg)

    best = int(curve.elevation_deg.argmax())
    best_local = jd_to_datetime(float(curve.jd[best]), tz=site.tzinfo)
    data = {
        "target": target.name,
        "site": site.name,
        "sunset_utc": jd_to_datetime(sunset_jd).isoformat(),
        "sunrise_utc": jd_to_datetime(sunrise_jd).isoformat(),
        "max_elevation_deg": curve.max_elevation_deg,
        "max_elevation_local": best_local.isoformat(timespec="minutes"),
        "min_airmass": float(curve.airmass[best]) if math.isfinite(curve.airmass[best]) else None,
        "plot": output,
    }
    if getattr(args, "json", False):
        print(json.dumps(_json_envelope(command="airmass", ok=True, data=data, error=None), indent=2))
    else:
        print(f"{target.name} at {site.name}")
        print(f"Highest: {data['max_elevation_deg']:.1f}° at {best_local:%Y-%m-%d %H:%M}")
        if data["min_airmass"] is not None:
            print(f"Lowest airmass: {data['min_airmass']:.2f}")
        if output:
            print(f"Plot: {output}")
    return EXIT_OK
