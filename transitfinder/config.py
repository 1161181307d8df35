from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tomli as tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:  # Python < 3.11
        import tomli as tomllib

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "transitfinder" / "config.toml"


class Config:
    def __init__(self, data: dict):
        self._data = data

    def _section(self, name: str) -> dict:
        return self._data.get(name, {})

    @property
    def site_observatory(self):
        return self._section("site").get("observatory", None)

    @property
    def site_name(self):
        return self._section("site").get("name", None)

    @property
    def site_latitude_deg(self):
        return self._section("site").get("latitude_deg", None)

    @property
    def site_longitude_deg(self):
        return self._section("site").get("longitude_deg", None)

    @property
    def site_timezone(self):
        return self._section("site").get("timezone", "UTC")

    @property
    def targets_path(self):
        path = self._section("targets").get("path", None)
        if not path:
            return None
        return Path(path).expanduser()

    @property
    def days_forward(self):
        return self._section("constraints").get("days_forward", 7)

    @property
    def days_backward(self):
        return self._section("constraints").get("days_backward", 0)

    @property
    def min_mid_elevation_deg(self):
        return self._section("constraints").get("min_mid_elevation_deg", 30.0)

    @property
    def min_start_end_elevation_deg(self):
        return self._section("constraints").get("min_start_end_elevation_deg", 20.0)

    @property
    def min_hour_angle(self):
        return self._section("constraints").get("min_hour_angle", -12.0)

    @property
    def max_hour_angle(self):
        return self._section("constraints").get("max_hour_angle", 12.0)

    @property
    def baseline_hours(self):
        return self._section("constraints").get("baseline_hours", 0.0)

    @property
    def twilight_deg(self):
        return self._section("constraints").get("twilight_deg", -12.0)

    @property
    def min_priority(self):
        return self._section("constraints").get("min_priority", None)

    @property
    def min_depth_ppt(self):
        return self._section("constraints").get("min_depth_ppt", None)

    @property
    def max_magnitude(self):
        return self._section("constraints").get("max_magnitude", None)

    @property
    def name_pattern(self):
        return self._section("constraints").get("name_pattern", None)

    @property
    def time_budget_s(self):
        return self._section("finder").get("time_budget_s", 120.0)


def load_config(path: Path | None = None) -> Config:
    explicit_path = path
    path = path or DEFAULT_CONFIG_PATH

    if not path.exists():
        if explicit_path is not None:
            raise FileNotFoundError(f"Config file not found: {path}")
        # Return default config if default file missing
        return Config({})

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return Config(data)
