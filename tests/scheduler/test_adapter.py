from __future__ import annotations

from datetime import datetime, timedelta, timezone

from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from trend_radar.scheduler import POLL_JOB_ID, PURGE_JOB_ID, APSchedulerAdapter


class StubScheduler:
    def __init__(self) -> None:
        self.calls: list[dict] = []

    def add_job(self, callback, trigger, id, replace_existing, **kwargs):  # noqa: ANN001
        self.calls.append(
            {
                "id": id,
                "trigger": trigger,
                "callback": callback,
                "replace_existing": replace_existing,
                **kwargs,
            }
        )

    def get_jobs(self):
        return []

    def start(self):
        self.calls.append({"event": "started"})

    def shutdown(self, wait=False):  # noqa: ARG002
        self.calls.append({"event": "shutdown"})

    def remove_job(self, job_id):  # noqa: ANN001
        self.calls.append({"event": "remove", "id": job_id})


def test_schedule_poll_uses_one_shot_date_trigger() -> None:
    adapter = APSchedulerAdapter()
    stub = StubScheduler()
    adapter.scheduler = stub  # type: ignore[assignment]

    before = datetime.now(timezone.utc)
    adapter.schedule_poll(lambda: None, 15)
    call = stub.calls[0]
    assert call["id"] == POLL_JOB_ID
    assert call["replace_existing"] is True
    assert call["max_instances"] == 1
    assert isinstance(call["trigger"], DateTrigger)
    run_date = call["trigger"].run_date
    assert before + timedelta(seconds=14) <= run_date <= datetime.now(timezone.utc) + timedelta(seconds=16)


def test_schedule_purge_uses_interval_trigger() -> None:
    adapter = APSchedulerAdapter()
    stub = StubScheduler()
    adapter.scheduler = stub  # type: ignore[assignment]

    adapter.schedule_purge(lambda: None, 600)
    call = stub.calls[0]
    assert call["id"] == PURGE_JOB_ID
    assert isinstance(call["trigger"], IntervalTrigger)
    assert call["trigger"].interval.total_seconds() == 600


def test_start_and_shutdown_remove_both_jobs() -> None:
    adapter = APSchedulerAdapter()
    stub = StubScheduler()
    adapter.scheduler = stub  # type: ignore[assignment]

    adapter.start()
    adapter.start()
    adapter.shutdown()
    adapter.shutdown()
    events = [entry for entry in stub.calls if "event" in entry]
    assert events == [
        {"event": "started"},
        {"event": "remove", "id": POLL_JOB_ID},
        {"event": "remove", "id": PURGE_JOB_ID},
        {"event": "shutdown"},
    ]
    assert adapter.started is False


def test_real_scheduler_rearms_poll_job() -> None:
    adapter = APSchedulerAdapter()
    adapter.start()
    try:
        adapter.schedule_poll(lambda: None, 60)
        adapter.schedule_poll(lambda: None, 120)
        adapter.schedule_purge(lambda: None, 600)
        jobs = {job["id"]: job for job in adapter.list_jobs()}
        assert set(jobs) == {POLL_JOB_ID, PURGE_JOB_ID}
        assert "date" in jobs[POLL_JOB_ID]["trigger"]
        assert "interval" in jobs[PURGE_JOB_ID]["trigger"]
    finally:
        adapter.shutdown()
    assert adapter.list_jobs() == []
