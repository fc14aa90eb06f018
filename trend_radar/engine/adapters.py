"""Source adapters: fetch one upstream endpoint and normalize its payload."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Sequence

import structlog

from ..config import SourceKind, SourceSettings
from .entity import UNKNOWN_NAME, CanonicalEntity, coerce_amount, coerce_epoch_ms, now_ms
from .fetcher import FetchRequest, Fetcher

Clock = Callable[[], int]


@dataclass(frozen=True, slots=True)
class FieldAliases:
    """Ordered raw field names per canonical attribute; first non-empty wins."""

    id: tuple[str, ...]
    display_name: tuple[str, ...]
    symbol: tuple[str, ...]
    market_cap_usd: tuple[str, ...]
    created_at_ms: tuple[str, ...]
    volume_usd: tuple[str, ...] = ()
    source_url: tuple[str, ...] = ()


LISTING_ALIASES = FieldAliases(
    id=("mint", "address", "id"),
    display_name=("name", "tokenName"),
    symbol=("symbol", "ticker", "tokenSymbol"),
    market_cap_usd=("marketCap", "usdMarketCap", "market_cap", "usd_market_cap"),
    created_at_ms=("createdTimestamp", "created_at", "created"),
    volume_usd=("volume", "volume24h"),
)

AGGREGATOR_ALIASES = FieldAliases(
    id=("tokenAddress", "address"),
    display_name=("tokenName", "name"),
    symbol=("tokenSymbol", "symbol"),
    market_cap_usd=("marketCap", "market_cap"),
    created_at_ms=("createdTimestamp",),
    volume_usd=("volume",),
    source_url=("url",),
)


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (list, dict, tuple)):
        return not value
    return False


def resolve_field(record: Mapping[str, Any], aliases: Iterable[str]) -> Any:
    for alias in aliases:
        value = record.get(alias)
        if not _is_blank(value):
            return value
    return None


def _as_text(value: Any) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def build_entity(
    record: Mapping[str, Any],
    aliases: FieldAliases,
    *,
    source: str,
    reference_ms: int,
    link_template: str | None = None,
) -> CanonicalEntity | None:
    """Map one raw record to a CanonicalEntity, or None when it has no id."""

    entity_id = _as_text(resolve_field(record, aliases.id))
    if entity_id is None:
        return None
    source_url = _as_text(resolve_field(record, aliases.source_url))
    if source_url is None and link_template:
        source_url = link_template.format(id=entity_id)
    return CanonicalEntity(
        id=entity_id,
        display_name=_as_text(resolve_field(record, aliases.display_name)) or UNKNOWN_NAME,
        symbol=_as_text(resolve_field(record, aliases.symbol)),
        market_cap_usd=coerce_amount(resolve_field(record, aliases.market_cap_usd)),
        created_at_ms=coerce_epoch_ms(resolve_field(record, aliases.created_at_ms), reference_ms),
        source_url=source_url,
        volume_usd=coerce_amount(resolve_field(record, aliases.volume_usd)),
        source=source,
    )


class SourceAdapter(ABC):
    """Fetch + normalize unit for a single upstream endpoint."""

    aliases: FieldAliases

    def __init__(self, settings: SourceSettings, fetcher: Fetcher, clock: Clock = now_ms) -> None:
        self.settings = settings
        self.fetcher = fetcher
        self.clock = clock
        self.logger = structlog.get_logger("trend_radar.adapters").bind(source=settings.name)

    @property
    def name(self) -> str:
        return self.settings.name

    def fetch_raw(self) -> Any:
        return self.fetcher.get_json(
            FetchRequest(source=self.name, url=self.settings.url, headers=self.settings.headers)
        )

    def normalize(self, raw: Any) -> list[CanonicalEntity]:
        records = self.extract_records(raw)
        reference_ms = self.clock()
        entities: list[CanonicalEntity] = []
        dropped = 0
        for record in records:
            if not isinstance(record, Mapping):
                dropped += 1
                continue
            entity = build_entity(
                record,
                self.aliases,
                source=self.name,
                reference_ms=reference_ms,
                link_template=self.settings.link_template,
            )
            if entity is None:
                dropped += 1
                continue
            entities.append(entity)
        if dropped:
            self.logger.debug("records_dropped", dropped=dropped, kept=len(entities))
        return entities

    def fetch(self) -> list[CanonicalEntity]:
        return self.normalize(self.fetch_raw())

    @abstractmethod
    def extract_records(self, raw: Any) -> Sequence[Any]:
        """Pick the list of raw records out of a decoded payload."""


class ListingAdapter(SourceAdapter):
    """Platform listing endpoints: bare list, ``{coins: [...]}`` or ``{data: [...]}``."""

    aliases = LISTING_ALIASES

    def extract_records(self, raw: Any) -> Sequence[Any]:
        if isinstance(raw, list):
            return raw
        if isinstance(raw, Mapping):
            for key in ("coins", "data"):
                candidate = raw.get(key)
                if isinstance(candidate, list):
                    return candidate
        self.logger.warning("unexpected_payload_shape", payload_type=type(raw).__name__)
        return []


class AggregatorAdapter(SourceAdapter):
    """Cross-chain aggregators; only entries for the target chain/platform survive."""

    aliases = AGGREGATOR_ALIASES

    def extract_records(self, raw: Any) -> Sequence[Any]:
        if not isinstance(raw, list):
            self.logger.warning("unexpected_payload_shape", payload_type=type(raw).__name__)
            return []
        return [item for item in raw if isinstance(item, Mapping) and self._matches(item)]

    def _matches(self, item: Mapping[str, Any]) -> bool:
        if item.get("chainId") == self.settings.chain_id:
            return True
        url = item.get("url")
        return isinstance(url, str) and self.settings.platform_domain in url


_ADAPTER_TYPES: dict[SourceKind, type[SourceAdapter]] = {
    SourceKind.LISTING: ListingAdapter,
    SourceKind.AGGREGATOR: AggregatorAdapter,
}


def build_adapters(
    sources: Iterable[SourceSettings], fetcher: Fetcher, clock: Clock = now_ms
) -> list[SourceAdapter]:
    return [_ADAPTER_TYPES[settings.kind](settings, fetcher, clock) for settings in sources]


__all__ = [
    "AGGREGATOR_ALIASES",
    "AggregatorAdapter",
    "FieldAliases",
    "LISTING_ALIASES",
    "ListingAdapter",
    "SourceAdapter",
    "build_adapters",
    "build_entity",
    "resolve_field",
]
