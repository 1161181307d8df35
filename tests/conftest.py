import pytest

from transitfinder.planner.astro import GeometryProvider
from transitfinder.planner.constraints import build_constraints
from transitfinder.planner.sun_events import build_sun_event_set
from transitfinder.planner.types import Site

# 2024-03-20 12:00 UTC
EQUINOX_NOON_JD = 2460390.0


def pytest_addoption(parser):
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run tests marked as integration",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--integration"):
        return

    for item in items:
        if "integration" in item.keywords:
            item.add_marker(
                pytest.mark.skip(
                    reason="need --integration option to run integration tests"
                )
            )


@pytest.fixture
def equinox_noon_jd():
    return EQUINOX_NOON_JD


@pytest.fixture
def equatorial_site():
    return Site(name="Equator", latitude_deg=0.0, longitude_deg=0.0, timezone="UTC")


@pytest.fixture
def equatorial_geometry(equatorial_site):
    return GeometryProvider(
        latitude_deg=equatorial_site.latitude_deg,
        longitude_deg=equatorial_site.longitude_deg,
    )


@pytest.fixture
def make_constraints(equatorial_site):
    """Factory for constraint bundles; defaults to one day from the equinox at the equator."""

    def _make(**overrides):
        values = {
            "site": equatorial_site,
            "window_start": EQUINOX_NOON_JD,
            "days_forward": 1,
            "min_mid_elevation_deg": 0.0,
            "min_start_end_elevation_deg": 0.0,
        }
        values.update(overrides)
        return build_constraints(**values)

    return _make


@pytest.fixture
def sun_events_for():
    def _build(constraints, geometry=None):
        site = constraints.site
        geometry = geometry or GeometryProvider(
            latitude_deg=site.latitude_deg, longitude_deg=site.longitude_deg
        )
        return build_sun_event_set(
            geometry,
            constraints.window_first_jd,
            constraints.window_end_jd,
            constraints.twilight_deg,
        )

    return _build
