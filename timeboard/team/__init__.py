"""Team roster."""

from timeboard.team.roster import TeamMember, TeamRoster

__all__ = ["TeamMember", "TeamRoster"]
