from .format import (
    deg_to_dms,
    deg_to_hms,
    format_clock,
    format_hour_angle,
    parse_dec_deg,
    parse_ra_deg,
    round_to_minute,
)

__all__ = [
    "deg_to_dms",
    "deg_to_hms",
    "format_clock",
    "format_hour_angle",
    "parse_dec_deg",
    "parse_ra_deg",
    "round_to_minute",
]
