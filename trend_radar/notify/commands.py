"""Telegram command handling (/start, /status, /check) via long polling."""

from __future__ import annotations

from threading import Event
from typing import TYPE_CHECKING, Any, Callable

import structlog

from ..errors import NotificationError
from .formatter import format_status_message, format_welcome_message

if TYPE_CHECKING:  # pragma: no cover
    from ..service import RadarService
    from .telegram import TelegramSink

CHECK_STARTED = "🔍 正在执行强制检查…"
CHECK_EMPTY = "✅ 未发现新的 Trending 代币。"
CHECK_BUSY = "⏳ 检查正在进行中，请稍后再试。"


def parse_command(text: str | None) -> str | None:
    """Return the bare command name of ``/cmd@bot args`` style text."""

    if not text or not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0][1:]
    command = head.split("@", 1)[0].lower()
    return command or None


class TelegramCommandListener:
    """Poll ``getUpdates`` and route chat commands to the service."""

    def __init__(
        self,
        sink: "TelegramSink",
        service: "RadarService",
        poll_timeout: int = 25,
        error_backoff: float = 5.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.sink = sink
        self.service = service
        self.poll_timeout = poll_timeout
        self.error_backoff = error_backoff
        self.logger = logger or structlog.get_logger("trend_radar.commands")
        self._offset: int | None = None
        self._handlers: dict[str, Callable[[Any], None]] = {
            "start": self.handle_start,
            "status": self.handle_status,
            "check": self.handle_check,
        }

    def serve_forever(self, stop_event: Event) -> None:
        self.logger.info("command_listener_started")
        while not stop_event.is_set():
            try:
                self.poll_once()
            except NotificationError as exc:
                self.logger.warning("command_poll_failed", error=str(exc))
                stop_event.wait(self.error_backoff)
        self.logger.info("command_listener_stopped")

    def poll_once(self) -> int:
        updates = self.sink.get_updates(offset=self._offset, timeout=self.poll_timeout)
        for update in updates:
            update_id = update.get("update_id")
            if isinstance(update_id, int):
                self._offset = update_id + 1
            self.handle_update(update)
        return len(updates)

    def handle_update(self, update: dict[str, Any]) -> bool:
        message = update.get("message") or {}
        chat_id = (message.get("chat") or {}).get("id")
        command = parse_command(message.get("text"))
        handler = self._handlers.get(command or "")
        if chat_id is None or handler is None:
            return False
        self.logger.info("command_received", command=command, chat_id=chat_id)
        handler(chat_id)
        return True

    def handle_start(self, chat_id: Any) -> None:
        config = self.service.config
        self._reply(chat_id, format_welcome_message(config.poll_interval_seconds, config.max_age_hours))

    def handle_status(self, chat_id: Any) -> None:
        self._reply(chat_id, format_status_message(self.service.status()))

    def handle_check(self, chat_id: Any) -> None:
        self._reply(chat_id, CHECK_STARTED)
        try:
            result = self.service.force_check()
        except Exception as exc:  # noqa: BLE001
            self.logger.error("forced_check_failed", error=str(exc))
            self._reply(chat_id, f"❌ 检查出错: {exc}")
            return
        if result.rejected:
            self._reply(chat_id, CHECK_BUSY)
        elif not result.notified:
            self._reply(chat_id, CHECK_EMPTY)

    def _reply(self, chat_id: Any, text: str) -> None:
        try:
            self.sink.send_to(chat_id, text)
        except NotificationError as exc:
            self.logger.warning("command_reply_failed", chat_id=chat_id, error=str(exc))


__all__ = ["CHECK_BUSY", "CHECK_EMPTY", "CHECK_STARTED", "TelegramCommandListener", "parse_command"]
