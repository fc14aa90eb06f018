"""Trend-Radar: trending token watcher with deduplicated Telegram alerts."""

__version__ = "0.1.0"
