"""Configuration layers for Timeboard.

Layers are merged in order, later layers winning:

1. ``default.toml`` from the config directory (required)
2. ``{TIMEBOARD_ENV}.toml`` from the same directory (optional)
3. ``TOGGL_TEAM``, a JSON array of ``{"name", "token"}`` objects, as the
   dashboard deployment provides the roster

``TIMEBOARD_*`` environment variables are applied on top of the merged
layers by :class:`~timeboard.config.settings.Settings`.
"""

import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

CONFIG_DIR_VAR = "TIMEBOARD_CONFIG_DIR"
ENVIRONMENT_VAR = "TIMEBOARD_ENV"
TEAM_VAR = "TOGGL_TEAM"

DEFAULT_ENVIRONMENT = "development"
DEFAULT_FILE = "default.toml"


@dataclass(frozen=True)
class ConfigLayer:
    """One named source of configuration values."""

    name: str
    values: dict[str, Any]


def find_config_dir(start: Path | None = None) -> Path:
    """Locate the directory holding ``default.toml``.

    ``TIMEBOARD_CONFIG_DIR`` wins when set and must exist. Otherwise the
    first ``config/`` directory with a ``default.toml`` found walking up
    from ``start`` (the working directory by default) is used.

    Raises:
        FileNotFoundError: If no config directory can be found
    """
    explicit = os.environ.get(CONFIG_DIR_VAR)
    if explicit:
        path = Path(explicit)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {explicit}")
        return path

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / "config"
        if (candidate / DEFAULT_FILE).is_file():
            return candidate

    raise FileNotFoundError(
        f"No config/{DEFAULT_FILE} found above {origin}. Set {CONFIG_DIR_VAR} to point at one."
    )


def current_environment() -> str:
    return os.environ.get(ENVIRONMENT_VAR) or DEFAULT_ENVIRONMENT


def read_toml(path: Path) -> dict[str, Any]:
    """Parse one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    with path.open("rb") as f:
        return tomllib.load(f)


def team_layer() -> ConfigLayer | None:
    """The roster from ``TOGGL_TEAM``, left as raw JSON for TeamConfig to parse."""
    raw = os.environ.get(TEAM_VAR)
    if not raw or not raw.strip():
        return None
    return ConfigLayer(TEAM_VAR, {"team": {"members": raw}})


def config_layers(config_dir: Path | None = None, environment: str | None = None) -> list[ConfigLayer]:
    """Collect the configuration layers that are present, lowest precedence first.

    Args:
        config_dir: Directory holding the TOML files; located when omitted
        environment: Environment name; read from ``TIMEBOARD_ENV`` when omitted

    Raises:
        FileNotFoundError: If ``default.toml`` is missing
    """
    config_dir = config_dir or find_config_dir()
    environment = environment or current_environment()

    default_path = config_dir / DEFAULT_FILE
    if not default_path.is_file():
        raise FileNotFoundError(f"Default configuration file not found: {default_path}")

    layers = [ConfigLayer(DEFAULT_FILE, read_toml(default_path))]

    env_path = config_dir / f"{environment}.toml"
    if env_path.is_file():
        layers.append(ConfigLayer(env_path.name, read_toml(env_path)))

    team = team_layer()
    if team is not None:
        layers.append(team)
    return layers


def merge_layers(*layers: Mapping[str, Any]) -> dict[str, Any]:
    """Merge mappings left to right.

    Tables merge key by key at every depth; any other value, lists
    included, replaces what came before. Inputs are not modified.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        _merge_into(merged, layer)
    return merged


def _merge_into(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, Mapping):
            existing = target.get(key)
            nested = dict(existing) if isinstance(existing, dict) else {}
            _merge_into(nested, value)
            target[key] = nested
        else:
            target[key] = value


def load_config(config_dir: Path | None = None, environment: str | None = None) -> dict[str, Any]:
    """Merge every present layer into one dictionary for the TOML settings source."""
    return merge_layers(*(layer.values for layer in config_layers(config_dir, environment)))
