"""In-memory notification dedup with TTL expiry."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Callable

import structlog

from .entity import now_ms

DEFAULT_TTL_MS = 6 * 60 * 60 * 1000


@dataclass(frozen=True, slots=True)
class DedupEntry:
    id: str
    first_seen_at_ms: int


class DedupTracker:
    """Remember which ids already produced a notification.

    Entries are write-once: ``mark_notified`` on a known id leaves the original
    timestamp untouched, so the retention window always counts from the first
    notification. Expiry only happens through ``purge_expired``, which the
    service runs on its own schedule. State lives in memory and is lost on
    restart.
    """

    def __init__(
        self,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = now_ms,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")
        self.ttl_ms = ttl_ms
        self.clock = clock
        self.logger = logger or structlog.get_logger("trend_radar.dedup")
        self._entries: dict[str, DedupEntry] = {}
        self._lock = Lock()

    def is_known(self, entity_id: str) -> bool:
        with self._lock:
            return entity_id in self._entries

    def mark_notified(self, entity_id: str, now: int | None = None) -> bool:
        """Record ``entity_id``; return False if it was already tracked."""

        timestamp = self.clock() if now is None else now
        with self._lock:
            if entity_id in self._entries:
                return False
            self._entries[entity_id] = DedupEntry(entity_id, timestamp)
        self.logger.debug("marked_notified", entity_id=entity_id)
        return True

    def purge_expired(self, now: int | None = None) -> int:
        reference = self.clock() if now is None else now
        with self._lock:
            expired = [
                entity_id
                for entity_id, entry in self._entries.items()
                if reference - entry.first_seen_at_ms > self.ttl_ms
            ]
            for entity_id in expired:
                del self._entries[entity_id]
            remaining = len(self._entries)
        if expired:
            self.logger.info("dedup_purged", removed=len(expired), tracked=remaining)
        return len(expired)

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def first_seen(self, entity_id: str) -> int | None:
        with self._lock:
            entry = self._entries.get(entity_id)
        return entry.first_seen_at_ms if entry else None

    def tracked_ids(self) -> list[str]:
        with self._lock:
            return list(self._entries)


__all__ = ["DEFAULT_TTL_MS", "DedupEntry", "DedupTracker"]
