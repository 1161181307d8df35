import argparse
import sys

from transitfinder import __version__
from transitfinder.cli.commands import run_airmass, run_observatories, run_transits
from transitfinder.planner.constraints import TWILIGHT_ELEVATIONS_DEG

LOG_LEVELS = ("debug", "info", "warn", "error")


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Enable logging at this level")
    parser.add_argument("--json", action="store_true", help="Output result as a JSON envelope")


def _add_site_options(parser: argparse.ArgumentParser) -> None:
    site = parser.add_argument_group("site")
    site.add_argument("--observatory", help="Named observatory (see `transitfinder observatories`)")
    site.add_argument("--lat", dest="latitude_deg", type=float, help="Site latitude (deg, north positive)")
    site.add_argument("--lon", dest="longitude_deg", type=float, help="Site longitude (deg, east positive)")
    site.add_argument("--tz", dest="timezone", help="IANA time zone for local times, e.g. America/Phoenix")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transitfinder",
        description="Find observable transits and eclipses of periodic targets.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    subparsers = parser.add_subparsers(dest="command")

    transits = subparsers.add_parser("transits", help="List observable events in a date window")
    _add_common_options(transits)
    _add_site_options(transits)
    transits.add_argument("--targets", help="Target list (.csv, or ,.-delimited text)")
    transits.add_argument("--start", help="Window start: 'now', 'today', a date or a date-time")
    transits.add_argument("--days", dest="days_forward", type=float, help="Days after the start")
    transits.add_argument("--days-back", dest="days_backward", type=float, help="Days before the start")
    transits.add_argument("--min-mid-elevation", type=float, help="Minimum elevation at mid-event (deg)")
    transits.add_argument(
        "--min-start-end-elevation",
        type=float,
        help="Minimum elevation at ingress or egress (deg)",
    )
    transits.add_argument("--min-hour-angle", type=float, help="Minimum hour angle at mid-event (h)")
    transits.add_argument("--max-hour-angle", type=float, help="Maximum hour angle at mid-event (h)")
    transits.add_argument("--baseline-hours", type=float, help="Out-of-event baseline on each side (h)")
    transits.add_argument(
        "--twilight",
        type=float,
        choices=TWILIGHT_ELEVATIONS_DEG,
        help="Sun elevation that defines night (deg)",
    )
    transits.add_argument("--min-priority", type=int, help="Only targets with at least this priority")
    transits.add_argument("--min-depth", type=float, help="Only targets at least this deep (ppt)")
    transits.add_argument("--max-magnitude", type=float, help="Only targets at least this bright")
    transits.add_argument("--name", help="Only targets whose name matches this regular expression")
    transits.add_argument("--secondary", action="store_true", help="Search secondary eclipses")
    transits.add_argument(
        "--format",
        choices=("text", "json", "csv", "html"),
        default="text",
        help="Output format (csv is a calendar import file)",
    )
    transits.add_argument("--output", help="Write output to this file instead of stdout")
    transits.add_argument("--verbose", action="store_true", help="Show coordinates and baselines")

    observatories = subparsers.add_parser("observatories", help="List known observatories")
    observatories.add_argument("--log-level", choices=LOG_LEVELS, help="Enable logging at this level")
    observatories.add_argument("--json", action="store_true", help="Output result as a JSON envelope")

    airmass = subparsers.add_parser("airmass", help="Airmass of one target through a night")
    _add_common_options(airmass)
    _add_site_options(airmass)
    airmass.add_argument("target", help="Target name as it appears in the target list")
    airmass.add_argument("--targets", help="Target list (.csv, or ,.-delimited text)")
    airmass.add_argument("--start", help="Night to plot: a date, 'today' or 'now'")
    airmass.add_argument(
        "--twilight",
        type=float,
        choices=TWILIGHT_ELEVATIONS_DEG,
        help="Sun elevation that defines night (deg)",
    )
    airmass.add_argument("--output", help="Write a PNG plot to this file")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"transitfinder {__version__}")
        return 0

    if args.command == "transits":
        return run_transits(args)

    if args.command == "observatories":
        return run_observatories(args)

    if args.command == "airmass":
        return run_airmass(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
