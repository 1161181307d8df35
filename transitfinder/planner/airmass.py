"""Airmass curves for a target over one night, and a plot of them."""

from dataclasses import dataclass
import datetime
import logging
import math
from pathlib import Path

import numpy as np

from .astro import SUN, GeometryProvider, jd_to_datetime
from .types import EventRecord, Target

logger = logging.getLogger(__name__)

DEFAULT_STEP_MINUTES = 5.0
# Below this the plane-parallel approximation is meaningless.
MIN_AIRMASS_ELEVATION_DEG = 5.0


@dataclass
class AirmassCurve:
    target: Target
    jd: np.ndarray
    elevation_deg: np.ndarray
    airmass: np.ndarray
    sun_elevation_deg: np.ndarray

    @property
    def max_elevation_deg(self) -> float:
        return float(np.max(self.elevation_deg))


def airmass_from_elevation(elevation_deg):
    """``1 / sin(alt)``; NaN when the target is too low for the formula."""
    elevation = np.asarray(elevation_deg, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        airmass = 1.0 / np.sin(np.radians(elevation))
    return np.where(elevation >= MIN_AIRMASS_ELEVATION_DEG, airmass, np.nan)


def airmass_curve(
    geometry: GeometryProvider,
    target: Target,
    start_jd: float,
    end_jd: float,
    step_minutes: float = DEFAULT_STEP_MINUTES,
) -> AirmassCurve:
    if end_jd <= start_jd:
        raise ValueError("Curve end must be after its start")
    if step_minutes <= 0:
        raise ValueError("Step must be positive")
    step = step_minutes / 1440.0
    count = math.ceil((end_jd - start_jd) / step)
    jd = start_jd + step * np.arange(count + 1)
    jd[-1] = min(jd[-1], end_jd)
    elevation = np.asarray(geometry.elevation(target, jd), dtype=float)
    return AirmassCurve(
        target=target,
        jd=jd,
        elevation_deg=elevation,
        airmass=airmass_from_elevation(elevation),
        sun_elevation_deg=np.asarray(geometry.elevation(SUN, jd), dtype=float),
    )


def plot_airmass(
    curve: AirmassCurve,
    output_path: Path,
    tzinfo: datetime.tzinfo | None = None,
    event: EventRecord | None = None,
    twilight_deg: float = -12.0,
) -> Path:
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.dates as mdates
    import matplotlib.pyplot as plt

    tzinfo = tzinfo or datetime.timezone.utc
    times = [jd_to_datetime(jd, tz=tzinfo) for jd in curve.jd]

    fig, ax = plt.subplots(figsize=(8, 4.5))
    try:
        ax.plot(times, curve.airmass, color="tab:blue", label=curve.target.name)
        dark = curve.sun_elevation_deg < twilight_deg
        ax.fill_between(
            times,
            0,
            1,
            where=~dark,
            color="0.85",
            transform=ax.get_xaxis_transform(),
            label="Sun above twilight",
        )
        if event is not None:
            for point in (event.start, event.end):
                ax.axvline(point.local, color="tab:red", linestyle="--")
            ax.axvline(event.mid.local, color="tab:red")
        ax.set_ylim(3.0, 1.0)
        ax.set_ylabel("Airmass")
        ax.set_xlabel(f"Local time ({tzinfo})")
        ax.xaxis.set_major_formatter(mdates.DateFormatter("%H:%M", tz=tzinfo))
        ax.set_title(f"{curve.target.name}, night of {times[0]:%Y-%m-%d}")
        ax.legend(loc="lower right")
        fig.autofmt_xdate()
        fig.savefig(output_path, dpi=100)
    finally:
        plt.close(fig)
    logger.info(f"Wrote airmass plot to {output_path}")
    return Path(output_path)
