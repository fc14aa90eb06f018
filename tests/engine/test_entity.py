from __future__ import annotations

import pytest

from trend_radar.engine import CanonicalEntity
from trend_radar.engine.entity import coerce_amount, coerce_epoch_ms

DEFAULT = 42


def test_identity_is_id_only() -> None:
    first = CanonicalEntity(id="X1", display_name="Foo", market_cap_usd=1)
    second = CanonicalEntity(id="X1", display_name="Bar", market_cap_usd=2)
    assert first == second
    assert len({first, second}) == 1
    assert first != CanonicalEntity(id="X2", display_name="Foo")


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1_700_000_000_000, 1_700_000_000_000),
        (1_700_000_000, 1_700_000_000_000),
        ("1700000000000", 1_700_000_000_000),
        ("2023-11-14T22:13:20Z", 1_700_000_000_000),
        ("2023-11-14T22:13:20", 1_700_000_000_000),
        (None, DEFAULT),
        (0, DEFAULT),
        ("", DEFAULT),
        ("yesterday", DEFAULT),
        (True, DEFAULT),
        ({"ts": 1}, DEFAULT),
        (float("nan"), DEFAULT),
        (float("inf"), DEFAULT),
        ("\u00b2", DEFAULT),
        ("\u0661\u0662", DEFAULT),
    ],
)
def test_coerce_epoch_ms(value, expected) -> None:
    assert coerce_epoch_ms(value, DEFAULT) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [(12.5, 12.5), ("3000", 3000.0), (-1, 0.0), ("abc", 0.0), (None, 0.0), (float("nan"), 0.0), (float("inf"), 0.0)],
)
def test_coerce_amount(value, expected) -> None:
    assert coerce_amount(value) == expected


def test_age_of_unknown_creation_time_is_zero() -> None:
    assert CanonicalEntity(id="X", created_at_ms=0).age_ms(10_000) == 0
    assert CanonicalEntity(id="X", created_at_ms=4_000).age_ms(10_000) == 6_000
