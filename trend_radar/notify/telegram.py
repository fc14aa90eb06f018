"""Telegram Bot API sink built on httpx."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from ..errors import DeliveryError, RateLimitError

API_BASE = "https://api.telegram.org"


class TelegramSink:
    """Send HTML messages to the configured chat and read command updates."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.chat_id = chat_id
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("trend_radar.telegram")
        self._base_url = f"{API_BASE}/bot{bot_token}"
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def emit(self, message: str) -> None:
        self.send_to(self.chat_id, message)

    def send_to(self, chat_id: str | int, text: str, parse_mode: str = "HTML") -> Any:
        return self._call(
            "sendMessage",
            {
                "chat_id": chat_id,
                "text": text,
                "parse_mode": parse_mode,
                "disable_web_page_preview": False,
            },
        )

    def get_updates(self, offset: int | None = None, timeout: int = 25) -> list[dict[str, Any]]:
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        result = self._call("getUpdates", payload, request_timeout=timeout + self.timeout)
        return result if isinstance(result, list) else []

    def _call(self, method: str, payload: dict[str, Any], request_timeout: float | None = None) -> Any:
        if self._client.is_closed:
            raise DeliveryError(f"{method} request failed: client closed")
        # the token is part of the URL, so never log it
        try:
            response = self._client.post(
                f"{self._base_url}/{method}",
                json=payload,
                timeout=request_timeout or self.timeout,
            )
        except httpx.HTTPError as exc:
            raise DeliveryError(f"{method} request failed: {type(exc).__name__}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.status_code == 429:
            parameters = body.get("parameters") or {}
            retry_after = parameters.get("retry_after") if isinstance(parameters, dict) else None
            raise RateLimitError(
                f"{method} rate limited",
                retry_after=float(retry_after) if retry_after is not None else None,
            )
        if not 200 <= response.status_code < 300 or not body.get("ok", False):
            description = body.get("description") or f"HTTP {response.status_code}"
            raise DeliveryError(f"{method} rejected: {description}")
        return body.get("result")


__all__ = ["API_BASE", "TelegramSink"]
