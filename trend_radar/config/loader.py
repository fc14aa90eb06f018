"""Configuration loading: optional YAML/JSON file overlaid by environment."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from ..errors import ConfigurationError
from .models import RadarConfig

CONFIG_ENV_VAR = "TREND_RADAR_CONFIG"

# environment variable -> RadarConfig field
ENV_FIELDS: dict[str, str] = {
    "BOT_TOKEN": "bot_token",
    "CHAT_ID": "chat_id",
    "POLL_INTERVAL_MS": "poll_interval_ms",
    "MAX_AGE_HOURS": "max_age_hours",
    "TTL_HOURS": "ttl_hours",
    "PURGE_INTERVAL_MINUTES": "purge_interval_minutes",
    "NOTIFY_DELAY_MS": "notify_delay_ms",
    "REQUEST_TIMEOUT_S": "request_timeout_s",
}

REQUIRED_ENV = ("BOT_TOKEN", "CHAT_ID")


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    return data


class ConfigLoader:
    """Resolve the runtime configuration, failing loudly when incomplete."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        config_path: Path | None = None,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        if config_path is None and self.environ.get(CONFIG_ENV_VAR):
            config_path = Path(self.environ[CONFIG_ENV_VAR]).expanduser()
        self.config_path = config_path

    def load(self) -> RadarConfig:
        payload: dict[str, Any] = {}
        if self.config_path is not None:
            if not self.config_path.exists():
                raise ConfigurationError(f"Config file not found: {self.config_path}")
            payload.update(_read_file(self.config_path))

        for env_name, field_name in ENV_FIELDS.items():
            value = self.environ.get(env_name)
            if value not in (None, ""):
                payload[field_name] = value

        missing = [
            env_name
            for env_name in REQUIRED_ENV
            if not str(payload.get(ENV_FIELDS[env_name]) or "").strip()
        ]
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

        try:
            return RadarConfig.model_validate(payload)
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {problems}") from exc


def load_config(config_path: Path | None = None) -> RadarConfig:
    return ConfigLoader(config_path=config_path).load()


__all__ = ["CONFIG_ENV_VAR", "ConfigLoader", "ENV_FIELDS", "load_config"]
