"""Notification sink, message formatting and chat commands."""

from .commands import TelegramCommandListener
from .formatter import format_coin_message
from .telegram import TelegramSink

__all__ = ["TelegramCommandListener", "TelegramSink", "format_coin_message"]
