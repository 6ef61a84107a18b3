"""Read views wired to their cache keys, TTLs and degradation messages."""

from typing import Any

from timeboard.cache.keys import member_day_key, team_day_key, team_week_key
from timeboard.config.models.resilience import CacheConfig
from timeboard.snapshots.models import ViewModel
from timeboard.snapshots.orchestrator import (
    DEFAULT_MESSAGES,
    WEEK_MESSAGES,
    FetchOrchestrator,
    ServedSnapshot,
)
from timeboard.snapshots.views import ViewBuilder
from timeboard.team.roster import TeamMember
from timeboard.utils.dates import last_seven_dates


def _dump(payload: ViewModel) -> dict[str, Any]:
    return payload.model_dump(mode="json", by_alias=True)


class SnapshotViewService:
    """Entry point for the read endpoints.

    Cached payloads are stored in their served JSON form so that replays
    from the durable tier are byte-for-byte what was computed.
    """

    def __init__(self, orchestrator: FetchOrchestrator, builder: ViewBuilder, ttls: CacheConfig):
        self._orchestrator = orchestrator
        self._builder = builder
        self._ttls = ttls

    async def member_day(self, member: TeamMember, day: str, *, refresh: bool, tz_offset: int) -> ServedSnapshot:
        async def fetch() -> dict[str, Any]:
            return _dump(await self._builder.member_day(member, day, tz_offset))

        return await self._orchestrator.serve(
            member_day_key(member.name, day),
            refresh=refresh,
            ttl_seconds=self._ttls.member_day_ttl_seconds,
            fetch=fetch,
            empty_payload=lambda: _dump(self._builder.empty_member_day(day)),
            messages=DEFAULT_MESSAGES,
        )

    async def team_day(self, day: str, *, refresh: bool, tz_offset: int) -> ServedSnapshot:
        async def fetch() -> dict[str, Any]:
            return _dump(await self._builder.team_day(day, tz_offset))

        return await self._orchestrator.serve(
            team_day_key(day),
            refresh=refresh,
            ttl_seconds=self._ttls.team_day_ttl_seconds,
            fetch=fetch,
            empty_payload=lambda: _dump(self._builder.empty_team_day(day)),
            messages=DEFAULT_MESSAGES,
        )

    async def team_week(self, end_day: str, *, refresh: bool) -> ServedSnapshot:
        async def fetch() -> dict[str, Any]:
            return _dump(await self._builder.team_week(end_day))

        return await self._orchestrator.serve(
            team_week_key(last_seven_dates(end_day)[0], end_day),
            refresh=refresh,
            ttl_seconds=self._ttls.team_week_ttl_seconds,
            fetch=fetch,
            empty_payload=lambda: _dump(self._builder.empty_team_week(end_day)),
            messages=WEEK_MESSAGES,
        )
