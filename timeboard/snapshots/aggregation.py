"""Pure helpers for summing and grouping time entries."""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from timeboard.snapshots.models import DaySummary, MemberWeek
from timeboard.upstream.models import TimeEntry


def total_seconds(entries: Iterable[TimeEntry], now: datetime) -> int:
    """Sum entry durations, counting running entries up to ``now``."""
    return sum(entry.elapsed_seconds(now) for entry in entries)


def sort_by_start(entries: Iterable[TimeEntry]) -> list[TimeEntry]:
    return sorted(entries, key=lambda entry: entry.start)


def needs_project_names(entries: Iterable[TimeEntry | None]) -> bool:
    return any(entry is not None and entry.project_id is not None for entry in entries)


def attach_project_name(entry: TimeEntry, project_names: dict[int, str]) -> TimeEntry:
    if entry.project_id is None:
        return entry
    return entry.model_copy(update={"project_name": project_names.get(entry.project_id)})


def bucket_by_day(entries: Iterable[TimeEntry], dates: Sequence[str], now: datetime) -> list[DaySummary]:
    """Per-date seconds and entry counts.

    Entries land on the UTC date of their start; entries outside ``dates``
    are dropped.
    """
    buckets = {day: DaySummary(date=day) for day in dates}
    for entry in entries:
        bucket = buckets.get(entry.start.astimezone(UTC).date().isoformat())
        if bucket is None:
            continue
        bucket.seconds += entry.elapsed_seconds(now)
        bucket.entry_count += 1
    return [buckets[day] for day in dates]


def summarize_week(name: str, entries: Iterable[TimeEntry], dates: Sequence[str], now: datetime) -> MemberWeek:
    days = bucket_by_day(entries, dates, now)
    return MemberWeek(
        name=name,
        total_seconds=sum(day.seconds for day in days),
        entry_count=sum(day.entry_count for day in days),
        days=days,
    )


def rank_members(members: Iterable[MemberWeek]) -> list[MemberWeek]:
    """Busiest first: total seconds, then entry count, then name."""
    return sorted(members, key=lambda m: (-m.total_seconds, -m.entry_count, m.name.casefold()))
