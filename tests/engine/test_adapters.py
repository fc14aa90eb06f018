from __future__ import annotations

import httpx
import pytest

from trend_radar.config import SourceKind, SourceSettings
from trend_radar.engine.adapters import (
    AggregatorAdapter,
    ListingAdapter,
    build_adapters,
    resolve_field,
)
from trend_radar.engine.coordinator import FetchCoordinator
from trend_radar.engine.fetcher import Fetcher

NOW = 1_700_000_000_000


def _listing(fetcher: Fetcher | None = None) -> ListingAdapter:
    settings = SourceSettings(name="listing", url="https://example.com/coins")
    return ListingAdapter(settings, fetcher or Fetcher(), clock=lambda: NOW)


def _aggregator() -> AggregatorAdapter:
    settings = SourceSettings(
        name="boosts",
        kind=SourceKind.AGGREGATOR,
        url="https://example.com/boosts",
        link_template=None,
    )
    return AggregatorAdapter(settings, Fetcher(), clock=lambda: NOW)


@pytest.mark.parametrize(
    "payload",
    [
        [{"mint": "X1", "name": "Foo"}],
        {"coins": [{"mint": "X1", "name": "Foo"}]},
        {"data": [{"mint": "X1", "name": "Foo"}]},
    ],
)
def test_listing_accepts_all_payload_shapes(payload) -> None:
    entities = _listing().normalize(payload)
    assert [entity.id for entity in entities] == ["X1"]
    assert entities[0].display_name == "Foo"
    assert entities[0].source_url == "https://pump.fun/coin/X1"
    assert entities[0].source == "listing"


@pytest.mark.parametrize("payload", [{"unexpected": []}, "text", None, 42])
def test_listing_unknown_shape_normalizes_to_empty(payload) -> None:
    assert _listing().normalize(payload) == []


def test_listing_coalesces_field_aliases() -> None:
    entity = _listing().normalize(
        [
            {
                "address": "ADDR",
                "tokenName": "Alias Coin",
                "ticker": "ALI",
                "marketCap": 0,
                "usdMarketCap": 5_500.5,
                "created_at": "2023-11-14T22:13:20Z",
                "volume24h": 77,
            }
        ]
    )[0]
    assert entity.id == "ADDR"
    assert entity.display_name == "Alias Coin"
    assert entity.symbol == "ALI"
    assert entity.market_cap_usd == 5_500.5
    assert entity.created_at_ms == 1_700_000_000_000
    assert entity.volume_usd == 77


def test_listing_missing_identifier_is_dropped() -> None:
    entities = _listing().normalize(
        [
            {"name": "No Id", "symbol": "NID", "marketCap": 10, "createdTimestamp": NOW},
            {"mint": "", "name": "Blank"},
            "not-a-record",
            {"mint": "OK"},
        ]
    )
    assert [entity.id for entity in entities] == ["OK"]


def test_listing_defaults_for_missing_fields() -> None:
    entity = _listing().normalize([{"mint": "M"}])[0]
    assert entity.display_name == "Unknown"
    assert entity.symbol is None
    assert entity.market_cap_usd == 0
    assert entity.created_at_ms == NOW


def test_listing_seconds_timestamp_is_scaled() -> None:
    entity = _listing().normalize([{"mint": "M", "createdTimestamp": 1_699_999_000}])[0]
    assert entity.created_at_ms == 1_699_999_000_000


@pytest.mark.parametrize("raw_created", ["NaN", "Infinity", "-Infinity", "\"\\u00b2\""])
def test_unusable_timestamp_keeps_sibling_records(raw_created: str) -> None:
    body = f'[{{"mint": "GOOD", "createdTimestamp": {NOW}}}, {{"mint": "BAD", "createdTimestamp": {raw_created}}}]'
    fetcher = Fetcher(
        client=httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, text=body)))
    )
    coordinator = FetchCoordinator([_listing(fetcher)])
    entities = coordinator.fetch()
    assert [entity.id for entity in entities] == ["GOOD", "BAD"]
    assert entities[1].created_at_ms == NOW
    assert coordinator.last_source == "listing"


def test_listing_negative_market_cap_is_clamped() -> None:
    entity = _listing().normalize([{"mint": "M", "marketCap": -5}])[0]
    assert entity.market_cap_usd == 0


def test_aggregator_filters_by_chain_or_platform_link() -> None:
    payload = [
        {"chainId": "solana", "tokenAddress": "SOL1", "url": "https://dexscreener.com/solana/SOL1"},
        {"chainId": "base", "tokenAddress": "BASE1", "url": "https://dexscreener.com/base/BASE1"},
        {"chainId": "ethereum", "tokenAddress": "PF1", "url": "https://pump.fun/coin/PF1"},
        {"chainId": "solana", "url": "https://dexscreener.com/solana/none"},
    ]
    entities = _aggregator().normalize(payload)
    assert [entity.id for entity in entities] == ["SOL1", "PF1"]
    assert entities[0].source_url == "https://dexscreener.com/solana/SOL1"
    assert entities[0].created_at_ms == NOW


def test_aggregator_requires_list_payload() -> None:
    assert _aggregator().normalize({"data": []}) == []


def test_resolve_field_first_non_empty_wins() -> None:
    record = {"a": None, "b": "  ", "c": "value", "d": "later"}
    assert resolve_field(record, ("a", "b", "c", "d")) == "value"
    assert resolve_field(record, ("missing",)) is None


def test_adapter_fetch_uses_configured_endpoint() -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"coins": [{"mint": "Z"}]})

    fetcher = Fetcher(client=httpx.Client(transport=httpx.MockTransport(handler)))
    entities = _listing(fetcher).fetch()
    assert seen == ["https://example.com/coins"]
    assert [entity.id for entity in entities] == ["Z"]


def test_build_adapters_respects_kind_and_order(radar_config) -> None:
    adapters = build_adapters(radar_config().sources, Fetcher())
    assert [type(adapter) for adapter in adapters] == [ListingAdapter, ListingAdapter, AggregatorAdapter]
    assert [adapter.name for adapter in adapters] == [
        "pumpfun-frontend",
        "pumpfun-client-api",
        "dexscreener-boosts",
    ]
