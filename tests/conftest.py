"""Pytest configuration providing shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from trend_radar.config import RadarConfig
from trend_radar.config.loader import ENV_FIELDS
from trend_radar.engine import CanonicalEntity

BASE_MS = 1_700_000_000_000


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, start_ms: int = BASE_MS) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class RecordingSink:
    """Collects emitted messages; ``failures`` is consumed one per emit."""

    def __init__(self) -> None:
        self.messages: list[str] = []
        self.replies: list[tuple[Any, str]] = []
        self.failures: list[Exception | None] = []
        self.closed = False

    def emit(self, message: str) -> None:
        if self.failures:
            failure = self.failures.pop(0)
            if failure is not None:
                raise failure
        self.messages.append(message)

    def send_to(self, chat_id: Any, text: str) -> None:
        self.replies.append((chat_id, text))

    def close(self) -> None:
        self.closed = True


class StubAdapter:
    """Adapter double returning canned entities or raising."""

    def __init__(
        self,
        name: str,
        entities: Iterable[CanonicalEntity] = (),
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.entities = list(entities)
        self.error = error
        self.calls = 0

    def fetch_raw(self) -> list[CanonicalEntity]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.entities

    def normalize(self, raw: list[CanonicalEntity]) -> list[CanonicalEntity]:
        return list(raw)


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TREND_RADAR_HOME", str(tmp_path / "home"))
    for env_name in (*ENV_FIELDS, "TREND_RADAR_CONFIG"):
        monkeypatch.delenv(env_name, raising=False)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def stub_adapter() -> Callable[..., StubAdapter]:
    return StubAdapter


@pytest.fixture
def make_entity(fake_clock: FakeClock) -> Callable[..., CanonicalEntity]:
    def _builder(entity_id: str, **overrides: Any) -> CanonicalEntity:
        base: dict[str, Any] = {
            "id": entity_id,
            "display_name": f"Coin {entity_id}",
            "symbol": entity_id.upper(),
            "market_cap_usd": 12_345.0,
            "created_at_ms": fake_clock.now - 1_000,
            "source": "stub",
        }
        base.update(overrides)
        return CanonicalEntity(**base)

    return _builder


@pytest.fixture
def radar_config() -> Callable[..., RadarConfig]:
    def _builder(**overrides: Any) -> RadarConfig:
        base: dict[str, Any] = {"bot_token": "123:abc", "chat_id": "-100200"}
        base.update(overrides)
        return RadarConfig(**base)

    return _builder
