"""Team roster configuration."""

import json
from typing import Any

from pydantic import BaseModel, Field, field_validator


class TeamMemberConfig(BaseModel):
    """A tracked member and the API token used on their behalf."""

    name: str
    token: str


class TeamConfig(BaseModel):
    """Team members whose time is tracked.

    Members can be listed in TOML as ``[[team.members]]`` tables or passed as
    a JSON array in ``TOGGL_TEAM`` or ``TIMEBOARD_TEAM__MEMBERS``. Entries with a blank name or
    token are dropped.
    """

    members: list[TeamMemberConfig] = Field(
        default_factory=list,
        description="Tracked members",
    )

    @field_validator("members", mode="before")
    @classmethod
    def parse_members(cls, v: Any) -> list[dict[str, str]]:
        """Accept a JSON string and drop incomplete entries."""
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                return []
        if not isinstance(v, list):
            return []

        members = []
        for item in v:
            if isinstance(item, TeamMemberConfig):
                item = item.model_dump()
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            token = item.get("token")
            if not isinstance(name, str) or not isinstance(token, str):
                continue
            name, token = name.strip(), token.strip()
            if name and token:
                members.append({"name": name, "token": token})
        return members
