from __future__ import annotations

import pytest

from trend_radar.engine import CanonicalEntity
from trend_radar.notify.formatter import (
    escape_html,
    format_coin_message,
    format_market_cap,
    format_startup_message,
    format_status_message,
    format_time_ago,
    format_welcome_message,
)
from trend_radar.service import StatusSnapshot

NOW = 1_700_000_000_000


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (0, "N/A"),
        (512.3, "$512.30"),
        (12_346, "$12.35K"),
        (4_200_000, "$4.20M"),
        (1_500_000_000, "$1.50B"),
    ],
)
def test_format_market_cap(value: float, expected: str) -> None:
    assert format_market_cap(value) == expected


@pytest.mark.parametrize(
    ("age_ms", "expected"),
    [
        (30_000, "刚刚"),
        (5 * 60_000, "5 分钟前"),
        (2 * 3_600_000, "2 小时前"),
        (50 * 3_600_000, "2 天前"),
    ],
)
def test_format_time_ago(age_ms: int, expected: str) -> None:
    assert format_time_ago(NOW - age_ms, NOW) == expected


def test_format_time_ago_unknown() -> None:
    assert format_time_ago(0, NOW) == "未知"


def test_escape_html() -> None:
    assert escape_html("<b>A & B</b>") == "&lt;b&gt;A &amp; B&lt;/b&gt;"
    assert escape_html(None) == ""


def test_coin_message_contains_links_and_escaped_fields() -> None:
    entity = CanonicalEntity(
        id="Mint123",
        display_name="<Doge> & Co",
        symbol="DOGE",
        market_cap_usd=25_000,
        created_at_ms=NOW - 10 * 60_000,
    )
    message = format_coin_message(entity, NOW)
    assert "<b>&lt;Doge&gt; &amp; Co</b> ($DOGE)" in message
    assert "MCap: $25.00K" in message
    assert "10 分钟前" in message
    assert 'href="https://pump.fun/coin/Mint123"' in message
    assert 'href="https://dexscreener.com/solana/Mint123"' in message
    assert message.endswith("<code>Mint123</code>")


def test_coin_message_placeholders_for_missing_fields() -> None:
    message = format_coin_message(CanonicalEntity(id="M"), NOW)
    assert "<b>Unknown</b> ($???)" in message
    assert "MCap: N/A" in message
    assert "未知" in message


def test_status_message() -> None:
    snapshot = StatusSnapshot(
        uptime_ms=2 * 3_600_000 + 5 * 60_000,
        tracked_count=7,
        last_check_at="2024-01-01T00:00:00+00:00",
        is_running=True,
    )
    message = format_status_message(snapshot)
    assert "运行中" in message
    assert "2小时 5分钟" in message
    assert "跟踪中的代币: 7" in message
    assert "2024-01-01T00:00:00+00:00" in message

    stopped = format_status_message(
        StatusSnapshot(uptime_ms=0, tracked_count=0, last_check_at=None, is_running=False)
    )
    assert "已停止" in stopped
    assert "暂无数据" in stopped


def test_startup_and_welcome_messages() -> None:
    assert "15 秒" in format_startup_message(15.0)
    welcome = format_welcome_message(15.0, 3)
    assert "/status" in welcome and "/check" in welcome
    assert "< 3 小时" in welcome
