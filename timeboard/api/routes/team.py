"""Team day and team week views."""

from typing import Any

from fastapi import APIRouter, Query

from timeboard.api.dependencies import TeamRosterDep, ViewServiceDep
from timeboard.api.models.views import render_envelope
from timeboard.api.routes.params import parse_date, parse_refresh, require_team
from timeboard.observability.logging import get_logger
from timeboard.utils.dates import clamp_tz_offset

logger = get_logger(__name__)

router = APIRouter()


@router.get("/team")
async def get_team_day(
    roster: TeamRosterDep,
    service: ViewServiceDep,
    date: str | None = Query(default=None),
    refresh: str | None = Query(default=None),
    tz_offset: str | None = Query(default=None, alias="tzOffset"),
) -> dict[str, Any]:
    """Get every member's entries for a day."""
    day = parse_date(date)
    require_team(roster)
    served = await service.team_day(day, refresh=parse_refresh(refresh), tz_offset=clamp_tz_offset(tz_offset))
    logger.debug("team_day_served", date=day, stale=served.stale)
    return render_envelope(served)


@router.get("/team-week")
async def get_team_week(
    roster: TeamRosterDep,
    service: ViewServiceDep,
    date: str | None = Query(default=None, description="Last day of the 7-day window"),
    refresh: str | None = Query(default=None),
) -> dict[str, Any]:
    """Get the 7-day rollup ending at ``date``, busiest member first."""
    end_day = parse_date(date)
    require_team(roster)
    served = await service.team_week(end_day, refresh=parse_refresh(refresh))
    logger.debug("team_week_served", end_date=end_day, stale=served.stale)
    return render_envelope(served)
