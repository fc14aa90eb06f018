"""Pydantic models describing radar settings."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class SourceKind(str, Enum):
    """Response families understood by the adapters."""

    LISTING = "listing"
    AGGREGATOR = "aggregator"


class SourceSettings(BaseModel):
    """One upstream endpoint, tried in list order."""

    name: str
    kind: SourceKind = SourceKind.LISTING
    url: str
    headers: dict[str, str] = Field(default_factory=lambda: {"Accept": "application/json"})
    # aggregator only: keep entries on this chain or linking to this domain
    chain_id: str = "solana"
    platform_domain: str = "pump.fun"
    link_template: str | None = "https://pump.fun/coin/{id}"

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("source name cannot be empty")
        return value

    @field_validator("url")
    @classmethod
    def _require_http(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"source url must be http(s): {value}")
        return value


def default_sources() -> list[SourceSettings]:
    return [
        SourceSettings(
            name="pumpfun-frontend",
            kind=SourceKind.LISTING,
            url="https://frontend-api.pump.fun/coins/trending",
        ),
        SourceSettings(
            name="pumpfun-client-api",
            kind=SourceKind.LISTING,
            url="https://client-api-2-74b1891ee9f9.herokuapp.com/coins?sort=trending",
        ),
        SourceSettings(
            name="dexscreener-boosts",
            kind=SourceKind.AGGREGATOR,
            url="https://api.dexscreener.com/token-boosts/top/v1",
            link_template=None,
        ),
    ]


class RadarConfig(BaseModel):
    """Everything the service needs at startup."""

    bot_token: str
    chat_id: str
    poll_interval_ms: int = 15_000
    max_age_hours: float = 3
    ttl_hours: float = 6
    purge_interval_minutes: float = 10
    notify_delay_ms: int = 500
    rate_limit_backoff_ms: int = 3_000
    request_timeout_s: float = 10
    sources: list[SourceSettings] = Field(default_factory=default_sources)
    user_agents: list[str] = Field(default_factory=lambda: [DEFAULT_USER_AGENT])

    @field_validator("bot_token", "chat_id", mode="before")
    @classmethod
    def _coerce_required(cls, value: object) -> str:
        text = "" if value is None else str(value).strip()
        if not text:
            raise ValueError("value is required")
        return text

    @field_validator(
        "poll_interval_ms",
        "max_age_hours",
        "ttl_hours",
        "purge_interval_minutes",
        "request_timeout_s",
    )
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("must be greater than 0")
        return value

    @field_validator("notify_delay_ms", "rate_limit_backoff_ms")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must be >= 0")
        return value

    @model_validator(mode="after")
    def _check_consistency(self) -> "RadarConfig":
        if not self.sources:
            raise ValueError("at least one source must be configured")
        names = [source.name for source in self.sources]
        if len(set(names)) != len(names):
            raise ValueError("source names must be unique")
        # a shorter retention would let a still-fresh coin alert twice
        if self.ttl_hours < self.max_age_hours:
            raise ValueError("ttl_hours must be >= max_age_hours")
        return self

    @property
    def max_age_ms(self) -> int:
        return int(self.max_age_hours * 3_600_000)

    @property
    def ttl_ms(self) -> int:
        return int(self.ttl_hours * 3_600_000)

    @property
    def poll_interval_seconds(self) -> float:
        return self.poll_interval_ms / 1000

    @property
    def purge_interval_seconds(self) -> float:
        return self.purge_interval_minutes * 60


__all__ = [
    "DEFAULT_USER_AGENT",
    "RadarConfig",
    "SourceKind",
    "SourceSettings",
    "default_sources",
]
