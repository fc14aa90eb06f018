"""Render entities and service state as Telegram HTML messages."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..engine.entity import CanonicalEntity, now_ms

if TYPE_CHECKING:  # pragma: no cover
    from ..service import StatusSnapshot

PUMPFUN_COIN_URL = "https://pump.fun/coin/{id}"
DEXSCREENER_URL = "https://dexscreener.com/solana/{id}"


def escape_html(text: str | None) -> str:
    if not text:
        return ""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def format_market_cap(market_cap: float) -> str:
    if not market_cap:
        return "N/A"
    if market_cap >= 1_000_000_000:
        return f"${market_cap / 1_000_000_000:.2f}B"
    if market_cap >= 1_000_000:
        return f"${market_cap / 1_000_000:.2f}M"
    if market_cap >= 1_000:
        return f"${market_cap / 1_000:.2f}K"
    return f"${market_cap:.2f}"


def format_time_ago(timestamp_ms: int, reference_ms: int | None = None) -> str:
    if not timestamp_ms:
        return "未知"
    reference = now_ms() if reference_ms is None else reference_ms
    diff = max(reference - timestamp_ms, 0)
    minutes = diff // 60_000
    hours = diff // 3_600_000
    if minutes < 1:
        return "刚刚"
    if minutes < 60:
        return f"{minutes} 分钟前"
    if hours < 24:
        return f"{hours} 小时前"
    return f"{hours // 24} 天前"


def format_coin_message(entity: CanonicalEntity, reference_ms: int | None = None) -> str:
    mint = escape_html(entity.id)
    lines = [
        "🚀 <b>刚刚进入 Trending！</b>",
        "",
        f"🪙 <b>{escape_html(entity.display_name)}</b> (${escape_html(entity.symbol or '???')})",
        f"💰 MCap: {format_market_cap(entity.market_cap_usd)}",
        f"⏰ 创建时间: {format_time_ago(entity.created_at_ms, reference_ms)}",
        (
            f'🔗 <a href="{PUMPFUN_COIN_URL.format(id=mint)}">Pump.fun</a>'
            f' | <a href="{DEXSCREENER_URL.format(id=mint)}">DexScreener</a>'
        ),
        "",
        f"<code>{mint}</code>",
    ]
    return "\n".join(lines)


def format_startup_message(poll_interval_seconds: float) -> str:
    return f"✅ <b>Pump.fun Trending 监控已启动</b>\n⏱ 检查间隔: {int(poll_interval_seconds)} 秒"


def format_welcome_message(poll_interval_seconds: float, max_age_hours: float) -> str:
    return "\n".join(
        [
            "👋 <b>欢迎使用 Pump.fun Trending Bot！</b>",
            "",
            "我会推送刚刚进入 pump.fun 热门榜的新币。",
            "",
            "<b>命令：</b>",
            "/status - 查看机器人状态",
            "/check - 立即执行一次检查",
            "",
            f"⏱ 检查间隔: {int(poll_interval_seconds)} 秒",
            f"🎯 只推送新币（< {max_age_hours:g} 小时）",
        ]
    )


def format_status_message(snapshot: "StatusSnapshot") -> str:
    uptime_hours = snapshot.uptime_ms // 3_600_000
    uptime_minutes = (snapshot.uptime_ms % 3_600_000) // 60_000
    state = "🟢 状态: 运行中" if snapshot.is_running else "🔴 状态: 已停止"
    return "\n".join(
        [
            "📊 <b>机器人状态</b>",
            "",
            state,
            f"⏱ 运行时长: {uptime_hours}小时 {uptime_minutes}分钟",
            f"📈 跟踪中的代币: {snapshot.tracked_count}",
            f"🕐 最近检查: {snapshot.last_check_at or '暂无数据'}",
        ]
    )


__all__ = [
    "escape_html",
    "format_coin_message",
    "format_market_cap",
    "format_startup_message",
    "format_status_message",
    "format_time_ago",
    "format_welcome_message",
]
