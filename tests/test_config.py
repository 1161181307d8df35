from pathlib import Path

import pytest

from transitfinder.config import Config, load_config

SAMPLE = """\
[site]
observatory = "Mauna Kea"

[targets]
path = "~/targets.csv"

[constraints]
days_forward = 14
min_mid_elevation_deg = 35
twilight_deg = -18
name_pattern = "WASP"

[finder]
time_budget_s = 30
"""


def test_defaults():
    config = Config({})
    assert config.site_observatory is None
    assert config.site_timezone == "UTC"
    assert config.targets_path is None
    assert config.days_forward == 7
    assert config.days_backward == 0
    assert config.min_mid_elevation_deg == 30.0
    assert config.min_start_end_elevation_deg == 20.0
    assert (config.min_hour_angle, config.max_hour_angle) == (-12.0, 12.0)
    assert config.baseline_hours == 0.0
    assert config.twilight_deg == -12.0
    assert config.min_priority is None
    assert config.time_budget_s == 120.0


def test_load_config(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(SAMPLE, encoding="utf-8")
    config = load_config(path)
    assert config.site_observatory == "Mauna Kea"
    assert config.targets_path == Path("~/targets.csv").expanduser()
    assert config.days_forward == 14
    assert config.min_mid_elevation_deg == 35
    assert config.min_start_end_elevation_deg == 20.0
    assert config.twilight_deg == -18
    assert config.name_pattern == "WASP"
    assert config.time_budget_s == 30


def test_explicit_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.toml")


def test_missing_default_config_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr("transitfinder.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.toml")
    assert load_config().days_forward == 7
