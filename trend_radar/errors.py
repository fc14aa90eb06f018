"""Exception hierarchy shared across the radar pipeline."""

from __future__ import annotations


class TrendRadarError(Exception):
    """Base class for every error raised by trend_radar."""


class ConfigurationError(TrendRadarError):
    """Required settings are missing or invalid; fatal at startup."""


class SourceError(TrendRadarError):
    """An upstream source could not produce usable data."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class SourceUnavailable(SourceError):
    """Network error, timeout or non-2xx status from a source."""


class MalformedResponse(SourceError):
    """Source answered, but the payload could not be decoded."""


class NotificationError(TrendRadarError):
    """The notification sink rejected a message."""


class RateLimitError(NotificationError):
    """Sink asked us to slow down (HTTP 429)."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class DeliveryError(NotificationError):
    """Any non rate-limit delivery failure."""


__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "MalformedResponse",
    "NotificationError",
    "RateLimitError",
    "SourceError",
    "SourceUnavailable",
    "TrendRadarError",
]
