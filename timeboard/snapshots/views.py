"""Builders computing each read view from the upstream API."""

import asyncio
from datetime import UTC, date, datetime, time

from timeboard.snapshots.aggregation import (
    attach_project_name,
    needs_project_names,
    rank_members,
    sort_by_start,
    summarize_week,
    total_seconds,
)
from timeboard.snapshots.models import (
    DaySummary,
    MemberDayPayload,
    MemberWeek,
    TeamDayPayload,
    TeamMemberDay,
    TeamWeekPayload,
)
from timeboard.team.roster import TeamMember, TeamRoster
from timeboard.upstream.client import TogglClient
from timeboard.upstream.models import TimeEntry
from timeboard.utils.clock import Clock, utc_now
from timeboard.utils.dates import build_utc_day_range, last_seven_dates


class ViewBuilder:
    """Fetches entries for roster members and shapes them into payloads.

    Every upstream failure propagates as UpstreamError; the caller decides
    whether to degrade.
    """

    def __init__(self, client: TogglClient, roster: TeamRoster, clock: Clock = utc_now):
        self._client = client
        self._roster = roster
        self._clock = clock

    async def member_day(self, member: TeamMember, day: str, tz_offset: int) -> MemberDayPayload:
        start, end = build_utc_day_range(day, tz_offset)
        now = self._clock()
        in_window = start <= now <= end

        if in_window:
            entries, current = await asyncio.gather(
                self._client.list_entries(member.token, start, end),
                self._client.get_current_entry(member.token),
            )
        else:
            entries = await self._client.list_entries(member.token, start, end)
            current = None

        entries = sort_by_start(entries)
        if needs_project_names([*entries, current]):
            names = await self._client.get_project_names(member.token)
            entries = [attach_project_name(entry, names) for entry in entries]
            if current is not None:
                current = attach_project_name(current, names)

        return MemberDayPayload(
            date=day,
            entries=entries,
            current=current,
            total_seconds=total_seconds(entries, self._clock()),
        )

    async def team_day(self, day: str, tz_offset: int) -> TeamDayPayload:
        start, end = build_utc_day_range(day, tz_offset)
        blocks = await asyncio.gather(
            *(self._team_member_day(member, start, end) for member in self._roster.members)
        )
        return TeamDayPayload(date=day, members=list(blocks))

    async def _team_member_day(self, member: TeamMember, start: datetime, end: datetime) -> TeamMemberDay:
        entries = sort_by_start(await self._client.list_entries(member.token, start, end))
        if needs_project_names(entries):
            names = await self._client.get_project_names(member.token)
            entries = [attach_project_name(entry, names) for entry in entries]
        return TeamMemberDay(
            name=member.name,
            entries=entries,
            total_seconds=total_seconds(entries, self._clock()),
        )

    async def team_week(self, end_day: str) -> TeamWeekPayload:
        dates = last_seven_dates(end_day)
        start = datetime.combine(date.fromisoformat(dates[0]), time.min, tzinfo=UTC)
        end = datetime.combine(date.fromisoformat(end_day), time(23, 59, 59), tzinfo=UTC)

        async def fetch(member: TeamMember) -> list[TimeEntry]:
            return await self._client.list_entries(member.token, start, end)

        members = self._roster.members
        results = await asyncio.gather(*(fetch(member) for member in members))
        now = self._clock()
        summaries = [
            summarize_week(member.name, entries, dates, now)
            for member, entries in zip(members, results, strict=True)
        ]
        return TeamWeekPayload(
            start_date=dates[0],
            end_date=end_day,
            week_dates=dates,
            members=rank_members(summaries),
        )

    # Zeroed payloads served when nothing was ever cached

    @staticmethod
    def empty_member_day(day: str) -> MemberDayPayload:
        return MemberDayPayload(date=day)

    def empty_team_day(self, day: str) -> TeamDayPayload:
        return TeamDayPayload(
            date=day,
            members=[TeamMemberDay(name=name) for name in self._roster.names()],
        )

    def empty_team_week(self, end_day: str) -> TeamWeekPayload:
        dates = last_seven_dates(end_day)
        return TeamWeekPayload(
            start_date=dates[0],
            end_date=end_day,
            week_dates=dates,
            members=[
                MemberWeek(name=name, days=[DaySummary(date=day) for day in dates])
                for name in self._roster.names()
            ],
        )
