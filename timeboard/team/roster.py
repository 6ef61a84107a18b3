"""Configured team members and their upstream API tokens."""

from dataclasses import dataclass

from timeboard.config.models.team import TeamConfig


@dataclass(frozen=True)
class TeamMember:
    name: str
    token: str


class TeamRoster:
    """Lookup of tracked members by case-insensitive name."""

    def __init__(self, members: list[TeamMember]) -> None:
        self._members = list(members)
        self._by_name = {member.name.lower(): member for member in self._members}

    @classmethod
    def from_config(cls, config: TeamConfig) -> "TeamRoster":
        return cls([TeamMember(name=m.name, token=m.token) for m in config.members])

    def __len__(self) -> int:
        return len(self._members)

    @property
    def members(self) -> list[TeamMember]:
        return list(self._members)

    def names(self) -> list[str]:
        return [member.name for member in self._members]

    def resolve(self, name: str | None) -> TeamMember | None:
        """Find a member by name, ignoring case and surrounding whitespace."""
        if not name:
            return None
        return self._by_name.get(name.strip().lower())
