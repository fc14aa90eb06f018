"""Service lifecycle: builds the pipeline and exposes the operator surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

from .config import RadarConfig
from .engine import DedupTracker, FetchCoordinator, Fetcher, build_adapters
from .engine.entity import now_ms
from .errors import NotificationError
from .infra import UserAgentPool
from .logging_conf import configure_logging
from .notify.formatter import format_coin_message, format_startup_message
from .notify.telegram import TelegramSink
from .orchestrator import CheckCycle, CycleResult
from .scheduler import APSchedulerAdapter


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    uptime_ms: int
    tracked_count: int
    last_check_at: str | None
    is_running: bool


class RadarService:
    """Own the tracker, the check cycle and both background schedules."""

    def __init__(
        self,
        config: RadarConfig,
        cycle: CheckCycle,
        tracker: DedupTracker,
        scheduler: APSchedulerAdapter,
        sink: TelegramSink,
        fetcher: Fetcher | None = None,
        clock: Callable[[], int] = now_ms,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.cycle = cycle
        self.tracker = tracker
        self.scheduler = scheduler
        self.sink = sink
        self.fetcher = fetcher
        self.clock = clock
        self.logger = logger or configure_logging().bind(component="service")
        self.started_at_ms = clock()
        self.is_running = False
        self.cycle.reschedule = self._arm_poll

    @classmethod
    def from_config(cls, config: RadarConfig) -> "RadarService":
        fetcher = Fetcher(
            timeout=config.request_timeout_s,
            ua_pool=UserAgentPool(config.user_agents),
        )
        coordinator = FetchCoordinator(build_adapters(config.sources, fetcher))
        tracker = DedupTracker(ttl_ms=config.ttl_ms)
        sink = TelegramSink(config.bot_token, config.chat_id, timeout=config.request_timeout_s)
        cycle = CheckCycle(
            coordinator,
            tracker,
            sink,
            format_coin_message,
            max_age_ms=config.max_age_ms,
            poll_interval_seconds=config.poll_interval_seconds,
            notify_delay_seconds=config.notify_delay_ms / 1000,
            rate_limit_backoff_seconds=config.rate_limit_backoff_ms / 1000,
        )
        return cls(config, cycle, tracker, APSchedulerAdapter(), sink, fetcher=fetcher)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self.is_running:
            return
        self.logger.info(
            "service_starting",
            poll_interval_ms=self.config.poll_interval_ms,
            max_age_hours=self.config.max_age_hours,
            ttl_hours=self.config.ttl_hours,
            sources=[source.name for source in self.config.sources],
        )
        self.is_running = True
        self.scheduler.start()
        self.scheduler.schedule_purge(self.purge, self.config.purge_interval_seconds)
        try:
            self.sink.emit(format_startup_message(self.config.poll_interval_seconds))
        except NotificationError as exc:
            self.logger.warning("startup_message_failed", error=str(exc))
        # first check runs immediately; it arms the next one itself
        self.scheduler.schedule_poll(self._timer_tick, 0)

    def stop(self) -> None:
        was_running = self.is_running
        self.is_running = False
        if was_running:
            self.scheduler.shutdown()
        # a timer cycle may still be sending; the clients must outlive it
        if self.cycle.in_flight:
            self.logger.info("waiting_for_cycle")
        self.cycle.wait_idle()
        self.sink.close()
        if self.fetcher is not None:
            self.fetcher.close()
        if was_running:
            self.logger.info("service_stopped")

    # ------------------------------------------------------------------
    # Operator surface
    # ------------------------------------------------------------------
    def status(self) -> StatusSnapshot:
        return StatusSnapshot(
            uptime_ms=self.clock() - self.started_at_ms,
            tracked_count=self.tracker.count(),
            last_check_at=self.cycle.last_check_at,
            is_running=self.is_running,
        )

    def force_check(self) -> CycleResult:
        return self.cycle.run(trigger="manual")

    def purge(self) -> int:
        return self.tracker.purge_expired()

    # ------------------------------------------------------------------
    def _timer_tick(self) -> None:
        if self.is_running:
            self.cycle.run(trigger="timer")

    def _arm_poll(self, delay_seconds: float) -> None:
        if self.is_running:
            self.scheduler.schedule_poll(self._timer_tick, delay_seconds)


__all__ = ["RadarService", "StatusSnapshot"]
