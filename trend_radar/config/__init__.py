"""Configuration package exports."""

from .loader import CONFIG_ENV_VAR, ConfigLoader, load_config
from .models import DEFAULT_USER_AGENT, RadarConfig, SourceKind, SourceSettings, default_sources

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigLoader",
    "DEFAULT_USER_AGENT",
    "RadarConfig",
    "SourceKind",
    "SourceSettings",
    "default_sources",
    "load_config",
]
