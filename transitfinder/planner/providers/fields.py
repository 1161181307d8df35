import math
import re

from transitfinder.errors import InputError
from transitfinder.planner.types import Ephemeris, ObservationType, Target
from transitfinder.util.format import parse_dec_deg, parse_ra_deg

# Catalogs write -99 for "unknown" magnitudes and depths.
UNKNOWN_SENTINEL = -99.0

_UNCERTAINTY_SEPARATOR = re.compile(r"\s*(?:\+/-|±)\s*")


def build_target(
    *,
    name: str | None,
    ra: str | None,
    dec: str | None,
    magnitude: str | None = None,
    epoch: str | None = None,
    epoch_uncertainty: str | None = None,
    period: str | None = None,
    period_uncertainty: str | None = None,
    duration: str | None = None,
    comments: str | None = None,
    priority: str | None = None,
    depth: str | None = None,
    observation_type: str | None = None,
    line_number: int | None = None,
) -> Target:
    name = _parse_optional(name)
    if name is None:
        raise InputError("Target name is missing")
    try:
        epoch_jd, epoch_err = parse_measured(epoch)
        period_days, period_err = parse_measured(period)
        if epoch_err is None:
            epoch_err = _parse_float(epoch_uncertainty)
        if period_err is None:
            period_err = _parse_float(period_uncertainty)
        duration_hours = _parse_float(duration)
        ephemeris = None
        if epoch_jd is not None and period_days is not None and duration_hours is not None:
            ephemeris = Ephemeris(
                epoch_jd=epoch_jd,
                period_days=period_days,
                duration_hours=duration_hours,
                epoch_uncertainty_days=epoch_err,
                period_uncertainty_days=period_err,
            )
        priority_value = _parse_float(priority)
        return Target(
            name=name,
            ra_deg=parse_ra_deg(ra or ""),
            dec_deg=parse_dec_deg(dec or ""),
            ephemeris=ephemeris,
            magnitude=_parse_known(magnitude),
            depth_ppt=_parse_known(depth),
            priority=None if priority_value is None else int(priority_value),
            comments=_parse_optional(comments) or "",
            observation_type=parse_observation_type(observation_type),
            line_number=line_number,
        )
    except ValueError as e:
        raise InputError(f"{name}: {e}") from e


def parse_measured(value: str | None) -> tuple[float | None, float | None]:
    """Split ``"2455000.123 +/- 0.0004"`` into value and uncertainty."""
    text = _parse_optional(value)
    if text is None:
        return None, None
    parts = _UNCERTAINTY_SEPARATOR.split(text, maxsplit=1)
    measured = _finite(float(parts[0]))
    uncertainty = _parse_float(parts[1]) if len(parts) > 1 else None
    return measured, uncertainty


def parse_observation_type(value: str | None) -> ObservationType:
    text = _parse_optional(value)
    if text is None:
        return ObservationType.PERIODIC
    try:
        return ObservationType(int(_finite(float(text))))
    except ValueError as e:
        raise InputError(f"Unknown observation type code: {text!r}") from e


def _parse_float(value: str | None) -> float | None:
    value = _parse_optional(value)
    if value is None:
        return None
    return _finite(float(value))


def _finite(number: float) -> float:
    if not math.isfinite(number):
        raise ValueError(f"expected a finite number, got {number!r}")
    return number


def _parse_known(value: str | None) -> float | None:
    number = _parse_float(value)
    if number is None or number == UNKNOWN_SENTINEL:
        return None
    return number


def _parse_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
