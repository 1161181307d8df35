import datetime

import pytest

from transitfinder.errors import InputError
from transitfinder.util.format import (
    deg_to_dms,
    deg_to_hms,
    format_clock,
    format_hour_angle,
    parse_dec_deg,
    parse_ra_deg,
    round_to_minute,
)


def test_deg_to_hms_zero():
    assert deg_to_hms(0.0) == "00:00:00.00"


def test_deg_to_hms_wrap():
    # 360 degrees -> 24h -> wrapped to 00
    assert deg_to_hms(360.0) == "00:00:00.00"


def test_deg_to_hms_precision():
    # 15 degrees = 1 hour
    assert deg_to_hms(15.0, precision=1) == "01:00:00.0"


def test_deg_to_hms_rounding_carry():
    # 23:59:59.96 with 1 decimal should round to 00:00:00.0
    seconds = (24 * 3600) - 0.04
    assert deg_to_hms(seconds / 240.0, precision=1) == "00:00:00.0"


def test_deg_to_dms_positive():
    assert deg_to_dms(10.0) == "+10:00:00.0"


def test_deg_to_dms_negative():
    assert deg_to_dms(-10.0, precision=2) == "-10:00:00.00"


def test_deg_to_dms_small_negative():
    assert deg_to_dms(-0.0001, precision=2).startswith("-00:00:")


def test_format_hour_angle():
    assert format_hour_angle(65.0 / 60.0) == "+01:05"
    assert format_hour_angle(-0.5) == "-00:30"
    assert format_hour_angle(0.0) == "+00:00"


def test_round_to_minute():
    dt = datetime.datetime(2024, 3, 20, 21, 14, 30, tzinfo=datetime.timezone.utc)
    assert round_to_minute(dt) == datetime.datetime(2024, 3, 20, 21, 15, tzinfo=datetime.timezone.utc)
    dt = datetime.datetime(2024, 3, 20, 21, 14, 29, 999000)
    assert round_to_minute(dt) == datetime.datetime(2024, 3, 20, 21, 14)


def test_round_to_minute_carries_into_next_day():
    dt = datetime.datetime(2024, 3, 20, 23, 59, 45)
    assert round_to_minute(dt) == datetime.datetime(2024, 3, 21, 0, 0)


def test_format_clock():
    assert format_clock(datetime.datetime(2024, 3, 20, 4, 7, 31)) == "04:08"


def test_parse_ra_sexagesimal_and_decimal_hours():
    assert parse_ra_deg("06:30:00") == pytest.approx(97.5)
    assert parse_ra_deg("6.5") == pytest.approx(97.5)


def test_parse_dec():
    assert parse_dec_deg("-29:30:00") == pytest.approx(-29.5)
    assert parse_dec_deg("+29:40:20.3") == pytest.approx(29 + 40 / 60 + 20.3 / 3600)
    assert parse_dec_deg("12.25") == pytest.approx(12.25)


@pytest.mark.parametrize("value", ["", "abc", "25:00:00"])
def test_parse_ra_rejects(value):
    with pytest.raises(InputError):
        parse_ra_deg(value)


@pytest.mark.parametrize("value", ["", "not a dec", "95"])
def test_parse_dec_rejects(value):
    with pytest.raises(InputError):
        parse_dec_deg(value)
