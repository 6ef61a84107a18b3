"""Configuration loading for Timeboard.

Configuration is loaded from TOML files with environment variable overrides.

Usage:
    from timeboard.config import get_settings

    settings = get_settings()
    ttl = settings.cache.member_day_ttl_seconds
"""

from functools import lru_cache

from timeboard.config.loader import config_layers, merge_layers, team_layer
from timeboard.config.settings import Settings, set_toml_config
from timeboard.observability.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the singleton settings instance.

    Configuration is loaded in this order:
    1. Pydantic model defaults (in code)
    2. config/default.toml (base configuration)
    3. config/{TIMEBOARD_ENV}.toml (environment overrides)
    4. TOGGL_TEAM (JSON team roster)
    5. TIMEBOARD_* environment variables (runtime overrides)

    The result is cached for the lifetime of the process.
    Call `get_settings.cache_clear()` to reload configuration.
    """
    try:
        layers = config_layers()
    except FileNotFoundError as e:
        logger.warning("config_file_not_found", error=str(e), msg="Using default configuration")
        team = team_layer()
        layers = [team] if team is not None else []

    set_toml_config(merge_layers(*(layer.values for layer in layers)))
    logger.debug("config_layers_loaded", layers=[layer.name for layer in layers])

    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["get_settings", "reload_settings", "Settings"]
