import csv
import datetime
import html
import io
import json
from dataclasses import asdict

from transitfinder.util.format import (
    deg_to_dms,
    deg_to_hms,
    format_clock,
    format_hour_angle,
    round_to_minute,
)
from .aggregate import group_by_night
from .astro import jd_to_datetime
from .types import AnyTimeRecord, EventPoint, EventRecord, FinderResult

CALENDAR_HEADER = (
    "Subject",
    "Start Date",
    "Start Time",
    "End Date",
    "End Time",
    "AllDayFlag",
    "Description",
)


def format_json(result: FinderResult) -> str:
    return json.dumps(asdict(result), indent=2, default=str)


def format_text(result: FinderResult, verbose: bool = False) -> str:
    constraints = result.constraints
    site = constraints.site
    tzinfo = constraints.tzinfo
    lines: list[str] = []
    lines.append("Transit Finder")
    lines.append("==============")
    lines.append(
        f"Site: {site.name} (lat {site.latitude_deg:.3f}°, lon {site.longitude_deg:.3f}°, {site.timezone})"
    )
    first = jd_to_datetime(constraints.window_first_jd, tz=tzinfo)
    last = jd_to_datetime(constraints.window_end_jd, tz=tzinfo)
    lines.append(f"Window (local): {first:%Y-%m-%d %H:%M} → {last:%Y-%m-%d %H:%M}")
    lines.append(
        f"Limits: mid ≥ {constraints.min_mid_elevation_deg:g}°, "
        f"ingress/egress ≥ {constraints.min_start_end_elevation_deg:g}°, "
        f"Sun below {constraints.twilight_deg:g}°"
    )
    lines.append(
        f"Targets: {result.targets_considered} searched, {result.targets_filtered} filtered out"
    )

    if result.message:
        lines.append("")
        lines.append(result.message)

    for night, scheduled in group_by_night(result.events):
        first_record = scheduled[0].record
        sunset = format_clock(jd_to_datetime(first_record.sunset_jd, tz=tzinfo))
        sunrise = format_clock(jd_to_datetime(first_record.sunrise_jd, tz=tzinfo))
        title = f"Night of {night.isoformat()} (sunset {sunset}, sunrise {sunrise})"
        lines.append("")
        lines.append(title)
        lines.append("-" * len(title))
        name_w = min(30, max(len(_event_name(s.record)) for s in scheduled))
        for s in scheduled:
            lines.append(_event_line(s.record, name_w, verbose))

    if result.anytime:
        lines.append("")
        lines.append("Any-time targets")
        lines.append("----------------")
        name_w = min(30, max(len(r.target.name) for r in result.anytime))
        for record in result.anytime:
            lines.append(_anytime_line(record, name_w))

    if result.issues:
        lines.append("")
        lines.append("Issues")
        lines.append("------")
        for issue in result.issues:
            where = f" (line {issue.line_number})" if issue.line_number is not None else ""
            lines.append(f"{issue.name}{where}: {issue.kind}: {issue.message}")
    return "\n".join(lines)


def format_calendar_csv(result: FinderResult) -> str:
    """Events as a calendar import file, one row per event in local time."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CALENDAR_HEADER)
    for scheduled in result.events:
        record = scheduled.record
        begin = (record.pre or record.start).local
        finish = (record.post or record.end).local
        writer.writerow(
            [
                _event_name(record),
                _calendar_date(begin),
                _calendar_time(begin),
                _calendar_date(finish),
                _calendar_time(finish),
                "False",
                _calendar_description(record),
            ]
        )
    return buf.getvalue()


def format_html(result: FinderResult) -> str:
    tzinfo = result.constraints.tzinfo
    rows: list[str] = []
    for scheduled in result.events:
        record = scheduled.record
        cells = []
        if scheduled.night_run_length > 0:
            sunset = format_clock(jd_to_datetime(record.sunset_jd, tz=tzinfo))
            sunrise = format_clock(jd_to_datetime(record.sunrise_jd, tz=tzinfo))
            cells.append(
                f'<td rowspan="{scheduled.night_run_length}">'
                f"{record.night.isoformat()}<br>{sunset}-{sunrise}</td>"
            )
        cells.append(f"<td>{html.escape(_event_name(record))}</td>")
        for point in (record.start, record.mid, record.end):
            cells.append(f"<td{_html_class(point)}>{_point_text(point)}</td>")
        cells.append(f"<td>{format_hour_angle(record.mid.hour_angle_hours)}</td>")
        cells.append(f"<td>{record.moon_separation_deg:.0f}° ({record.moon_illumination:.0%})</td>")
        cells.append(f"<td>{html.escape(record.target.comments)}</td>")
        rows.append("<tr>" + "".join(cells) + "</tr>")

    site = result.constraints.site
    parts = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '<meta charset="utf-8">',
        f"<title>Transits at {html.escape(site.name)}</title>",
        "<style>td.day { color: #999; } td.low { font-style: italic; }</style>",
        "</head>",
        "<body>",
        f"<h1>Transits at {html.escape(site.name)}</h1>",
    ]
    if result.message:
        parts.append(f"<p>{html.escape(result.message)}</p>")
    parts.append("<table>")
    parts.append(
        "<tr><th>Night</th><th>Target</th><th>Start</th><th>Mid</th><th>End</th>"
        "<th>HA</th><th>Moon</th><th>Comments</th></tr>"
    )
    parts.extend(rows)
    parts.append("</table>")
    parts.append("</body>")
    parts.append("</html>")
    return "\n".join(parts)


def _event_name(record: EventRecord) -> str:
    if record.secondary:
        return f"{record.target.name} (secondary)"
    return record.target.name


def _event_line(record: EventRecord, name_w: int, verbose: bool) -> str:
    name = _pad(_truncate(_event_name(record), name_w), name_w)
    line = (
        f"  {name}  start {_point_text(record.start)}  mid {_point_text(record.mid)}"
        f"  end {_point_text(record.end)}  HA {format_hour_angle(record.mid.hour_angle_hours)}"
        f"  moon {record.moon_separation_deg:.0f}° {record.moon_illumination:.0%}"
    )
    if record.timing_uncertainty_minutes is not None:
        line += f"  ±{record.timing_uncertainty_minutes:.0f} min"
    notes = _event_notes(record)
    if notes:
        line += "  " + "; ".join(notes)
    if verbose:
        target = record.target
        line += f"  [{deg_to_hms(target.ra_deg)} {deg_to_dms(target.dec_deg)}, cycle {record.cycle}]"
        if record.pre is not None and record.post is not None:
            line += f"  baseline {format_clock(record.pre.local)}-{format_clock(record.post.local)}"
    return line


def _event_notes(record: EventRecord) -> list[str]:
    notes = []
    if record.starts_before_sunset:
        notes.append("starts before dark")
    if record.middle_in_daytime:
        notes.append("mid-point in daylight")
    if record.ends_after_sunrise:
        notes.append("ends after dawn")
    return notes


def _anytime_line(record: AnyTimeRecord, name_w: int) -> str:
    name = _pad(_truncate(record.target.name, name_w), name_w)
    return (
        f"  {name}  night {record.night.isoformat()}  "
        f"best {format_clock(record.max_elevation_local)} ({record.max_elevation_deg:.0f}°, "
        f"az {record.azimuth_deg:.0f}°)  HA {format_hour_angle(record.hour_angle_hours)}"
    )


def _point_text(point: EventPoint) -> str:
    return f"{format_clock(point.local)} ({point.elevation_deg:.0f}°)"


def _html_class(point: EventPoint) -> str:
    classes = []
    if point.is_daytime:
        classes.append("day")
    if not point.elevation_ok:
        classes.append("low")
    return f' class="{" ".join(classes)}"' if classes else ""


def _calendar_date(dt: datetime.datetime) -> str:
    return round_to_minute(dt).strftime("%m/%d/%Y")


def _calendar_time(dt: datetime.datetime) -> str:
    return round_to_minute(dt).strftime("%I:%M %p")


def _calendar_description(record: EventRecord) -> str:
    target = record.target
    parts = [
        f"Mid {format_clock(record.mid.local)}",
        f"elevations {record.start.elevation_deg:.0f}/{record.mid.elevation_deg:.0f}/"
        f"{record.end.elevation_deg:.0f} deg",
    ]
    if target.depth_ppt is not None:
        parts.append(f"depth {target.depth_ppt:g} ppt")
    if target.magnitude is not None:
        parts.append(f"V {target.magnitude:g}")
    if target.comments:
        parts.append(target.comments)
    return "; ".join(parts)


def _truncate(value: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(value) <= width:
        return value
    if width <= 3:
        return value[:width]
    return value[: width - 3] + "..."


def _pad(value: str, width: int) -> str:
    if len(value) >= width:
        return value
    return value + (" " * (width - len(value)))
