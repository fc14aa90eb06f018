"""Canonical token record produced by every source adapter."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone

# anything below this is a seconds-based epoch
_MS_THRESHOLD = 1_000_000_000_000

UNKNOWN_NAME = "Unknown"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class CanonicalEntity:
    """Normalized token. Identity is the mint address alone."""

    id: str
    display_name: str = field(default=UNKNOWN_NAME, compare=False)
    symbol: str | None = field(default=None, compare=False)
    market_cap_usd: float = field(default=0.0, compare=False)
    created_at_ms: int = field(default=0, compare=False)
    source_url: str | None = field(default=None, compare=False)
    volume_usd: float = field(default=0.0, compare=False)
    source: str = field(default="", compare=False)

    def age_ms(self, reference_ms: int) -> int:
        if self.created_at_ms <= 0:
            return 0
        return reference_ms - self.created_at_ms


def coerce_epoch_ms(value: object, default_ms: int) -> int:
    """Turn ms/seconds numbers or ISO strings into epoch milliseconds."""

    if value is None or isinstance(value, bool):
        return default_ms
    if isinstance(value, (int, float)):
        numeric = float(value)
        if not math.isfinite(numeric) or numeric <= 0:
            return default_ms
        if numeric < _MS_THRESHOLD:
            numeric *= 1000
        return int(numeric)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default_ms
        if text.isdecimal() and text.isascii():
            return coerce_epoch_ms(int(text), default_ms)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return default_ms
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)
    return default_ms


def coerce_amount(value: object) -> float:
    """Non-negative float, 0 for anything unusable."""

    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


__all__ = ["CanonicalEntity", "UNKNOWN_NAME", "coerce_amount", "coerce_epoch_ms", "now_ms"]
