import datetime
from typing import Iterable, Sequence

from .events import EnumerationResult
from .types import EventRecord, ScheduledEvent


def sort_permutation(jds: Sequence[float]) -> list[int]:
    """Indices that order ``jds`` ascending; ties keep input order."""
    return sorted(range(len(jds)), key=lambda i: jds[i])


def annotate_night_runs(records: Sequence[EventRecord]) -> list[ScheduledEvent]:
    """Attach same-night run lengths to records that are already sorted.

    The first record of each run of equal ``night`` labels carries the run
    size; the rest carry 0.
    """
    lengths = [0] * len(records)
    run_start = 0
    for i in range(1, len(records) + 1):
        if i == len(records) or records[i].night != records[run_start].night:
            lengths[run_start] = i - run_start
            run_start = i
    return [
        ScheduledEvent(record=record, night_run_length=length)
        for record, length in zip(records, lengths)
    ]


def aggregate(results: Iterable[EnumerationResult]) -> list[ScheduledEvent]:
    records: list[EventRecord] = []
    jds: list[float] = []
    for result in results:
        records.extend(result.records)
        jds.extend(result.jds)
    order = sort_permutation(jds)
    return annotate_night_runs([records[i] for i in order])


def group_by_night(
    scheduled: Sequence[ScheduledEvent],
) -> list[tuple[datetime.date, list[ScheduledEvent]]]:
    groups: list[tuple[datetime.date, list[ScheduledEvent]]] = []
    i = 0
    while i < len(scheduled):
        run = max(1, scheduled[i].night_run_length)
        groups.append((scheduled[i].record.night, list(scheduled[i : i + run])))
        i += run
    return groups
