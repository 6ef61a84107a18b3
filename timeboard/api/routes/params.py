"""Query parameter parsing shared by the read endpoints."""

from timeboard.api.exceptions import InvalidRequestError, MemberNotFoundError
from timeboard.team.roster import TeamMember, TeamRoster
from timeboard.utils.clock import Clock, utc_now
from timeboard.utils.dates import is_valid_date, today_utc

REFRESH_VALUES = frozenset({"1", "true", "yes"})


def parse_refresh(value: str | None) -> bool:
    return value is not None and value.strip().lower() in REFRESH_VALUES


def parse_date(value: str | None, clock: Clock = utc_now) -> str:
    """Validate a ``YYYY-MM-DD`` date, defaulting to today in UTC."""
    if value is None or not value.strip():
        return today_utc(clock())
    value = value.strip()
    if not is_valid_date(value):
        raise InvalidRequestError("Invalid date")
    return value


def require_member(roster: TeamRoster, name: str | None) -> TeamMember:
    if name is None or not name.strip():
        raise InvalidRequestError("Missing member")
    member = roster.resolve(name)
    if member is None:
        raise MemberNotFoundError("Unknown member")
    return member


def require_team(roster: TeamRoster) -> None:
    if len(roster) == 0:
        raise InvalidRequestError("No members configured")
