"""Cache key builders.

Identical logical queries must always map to the identical key, so member
names are case-normalized and dates are plain ``YYYY-MM-DD`` strings. Every
key starts with its view name so views never share a key.
"""


def member_day_key(member: str, day: str) -> str:
    return f"member::{member.strip().lower()}::{day}"


def team_day_key(day: str) -> str:
    return f"team::{day}"


def team_week_key(start_day: str, end_day: str) -> str:
    return f"team-week::{start_day}::{end_day}"
