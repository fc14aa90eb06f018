"""Check cycle wiring fetching, freshness filtering, dedup and notification."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Callable, Protocol

import structlog

from .engine import CanonicalEntity, DedupTracker, FetchCoordinator, keep_fresh
from .engine.entity import now_ms
from .engine.freshness import DEFAULT_MAX_AGE_MS
from .errors import NotificationError, RateLimitError
from .logging_conf import configure_logging


class NotificationSink(Protocol):
    def emit(self, message: str) -> None: ...


class CycleState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    FILTERING = "filtering"
    NOTIFYING = "notifying"
    SCHEDULED = "scheduled"


@dataclass(slots=True)
class CycleResult:
    """Outcome of one poll → filter → notify pass."""

    trigger: str
    started_at_ms: int
    finished_at_ms: int | None = None
    fetched: int = 0
    fresh: int = 0
    notified: list[CanonicalEntity] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    rejected: bool = False

    @property
    def new_count(self) -> int:
        return len(self.notified)


class CheckCycle:
    """Run poll cycles one at a time.

    ``run`` walks IDLE → FETCHING → FILTERING → NOTIFYING → SCHEDULED → IDLE.
    Entities are marked in the tracker before delivery, so a failed send is
    not retried on the next cycle. A second trigger while a cycle is in flight
    is rejected instead of running concurrently against the tracker.
    """

    def __init__(
        self,
        coordinator: FetchCoordinator,
        tracker: DedupTracker,
        sink: NotificationSink,
        formatter: Callable[[CanonicalEntity], str],
        *,
        max_age_ms: int = DEFAULT_MAX_AGE_MS,
        poll_interval_seconds: float = 15.0,
        notify_delay_seconds: float = 0.5,
        rate_limit_backoff_seconds: float = 3.0,
        reschedule: Callable[[float], None] | None = None,
        clock: Callable[[], int] = now_ms,
        sleeper: Callable[[float], None] = time.sleep,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.coordinator = coordinator
        self.tracker = tracker
        self.sink = sink
        self.formatter = formatter
        self.max_age_ms = max_age_ms
        self.poll_interval_seconds = poll_interval_seconds
        self.notify_delay_seconds = notify_delay_seconds
        self.rate_limit_backoff_seconds = rate_limit_backoff_seconds
        self.reschedule = reschedule
        self.clock = clock
        self.sleeper = sleeper
        self.logger = logger or configure_logging().bind(component="check_cycle")
        self.state = CycleState.IDLE
        self.last_check_at: str | None = None
        self._flight = Lock()

    @property
    def in_flight(self) -> bool:
        return self._flight.locked()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no cycle is in flight; False if ``timeout`` ran out first."""

        acquired = self._flight.acquire(timeout=-1 if timeout is None else timeout)
        if acquired:
            self._flight.release()
        return acquired

    def run(self, trigger: str = "timer") -> CycleResult:
        result = CycleResult(trigger=trigger, started_at_ms=self.clock())
        if not self._flight.acquire(blocking=False):
            result.rejected = True
            result.finished_at_ms = self.clock()
            self.logger.info("cycle_rejected", trigger=trigger, state=self.state.value)
            return result
        try:
            queue = self._collect(result)
            if queue:
                self._notify(queue, result)
        finally:
            result.finished_at_ms = self.clock()
            self.last_check_at = (
                datetime.fromtimestamp(result.finished_at_ms / 1000, tz=timezone.utc)
                .isoformat(timespec="seconds")
            )
            self._schedule_next()
            self.state = CycleState.IDLE
            self._flight.release()
        self.logger.info(
            "cycle_finished",
            trigger=trigger,
            fetched=result.fetched,
            fresh=result.fresh,
            notified=result.new_count,
            failed=len(result.failed),
            duration_ms=result.finished_at_ms - result.started_at_ms,
        )
        return result

    def _collect(self, result: CycleResult) -> list[CanonicalEntity]:
        self.state = CycleState.FETCHING
        try:
            entities = self.coordinator.fetch()
        except Exception as exc:  # noqa: BLE001
            self.logger.error("fetch_crashed", error=str(exc), error_type=type(exc).__name__)
            return []
        result.fetched = len(entities)

        self.state = CycleState.FILTERING
        fresh = keep_fresh(entities, self.max_age_ms, self.clock())
        result.fresh = len(fresh)
        queue: list[CanonicalEntity] = []
        for entity in fresh:
            if self.tracker.is_known(entity.id):
                continue
            # a source listing the same id twice still yields one alert
            if self.tracker.mark_notified(entity.id, self.clock()):
                queue.append(entity)
        return queue

    def _notify(self, queue: list[CanonicalEntity], result: CycleResult) -> None:
        self.state = CycleState.NOTIFYING
        for index, entity in enumerate(queue):
            if index:
                self.sleeper(self.notify_delay_seconds)
            message = self.formatter(entity)
            if self._deliver(entity, message):
                result.notified.append(entity)
            else:
                result.failed.append(entity.id)

    def _deliver(self, entity: CanonicalEntity, message: str) -> bool:
        try:
            self.sink.emit(message)
        except RateLimitError as exc:
            self.logger.warning(
                "notification_rate_limited",
                entity_id=entity.id,
                retry_after=exc.retry_after,
                backoff=self.rate_limit_backoff_seconds,
            )
            self.sleeper(self.rate_limit_backoff_seconds)
            try:
                self.sink.emit(message)
            except NotificationError as retry_exc:
                self.logger.error("notification_retry_failed", entity_id=entity.id, error=str(retry_exc))
                return False
            self.logger.info("notification_retry_succeeded", entity_id=entity.id)
            return True
        except NotificationError as exc:
            self.logger.error("notification_failed", entity_id=entity.id, error=str(exc))
            return False
        self.logger.info("notification_sent", entity_id=entity.id, name=entity.display_name)
        return True

    def _schedule_next(self) -> None:
        self.state = CycleState.SCHEDULED
        if self.reschedule is None:
            return
        try:
            self.reschedule(self.poll_interval_seconds)
        except Exception as exc:  # noqa: BLE001
            self.logger.error("reschedule_failed", error=str(exc))


__all__ = ["CheckCycle", "CycleResult", "CycleState", "NotificationSink"]
