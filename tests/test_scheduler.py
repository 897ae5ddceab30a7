# ruff: noqa: S101
"""Tests for per-job audit scheduling and cancellation."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from filenotify.core.detector import ChangeDetector
from filenotify.core.models import AuditAlert, AuditJob, AuditPlan, FileSnapshot
from filenotify.core.scheduler import AuditRunner, AuditScheduler

# 0.05s period expressed in minutes
FAST_POLL = 0.05 / 60


def _job(path: str = "/srv") -> AuditJob:
    return AuditJob(plan=AuditPlan(kind="d", path=path), baseline=())


class TickRecorder:
    """Records (job_no, monotonic time) for each pass; can be made slow."""

    def __init__(self, delay: float = 0.0) -> None:
        self.calls: list[tuple[int, float]] = []
        self.delay = delay
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    def __call__(self, job: AuditJob, job_no: int) -> None:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.calls.append((job_no, time.monotonic()))
        if self.delay:
            time.sleep(self.delay)
        with self._lock:
            self.active -= 1

    def count(self, job_no: int) -> int:
        with self._lock:
            return sum(1 for n, _ in self.calls if n == job_no)


class DummyDispatcher:
    """Dispatcher stub recording batches."""

    def __init__(self) -> None:
        self.batches: list[list[AuditAlert]] = []

    def dispatch(self, alerts: list[AuditAlert]) -> int:
        self.batches.append(list(alerts))
        return len(alerts)


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return False


def test_start_offset_staggers_jobs() -> None:
    scheduler = AuditScheduler(TickRecorder(), poll_minutes=1)

    assert [scheduler.start_offset(n) for n in range(3)] == [0, 30, 60]


def test_rejects_non_positive_poll() -> None:
    with pytest.raises(ValueError):
        AuditScheduler(TickRecorder(), poll_minutes=0)


def test_jobs_tick_repeatedly_until_stopped() -> None:
    tick = TickRecorder()
    scheduler = AuditScheduler(tick, poll_minutes=FAST_POLL, stagger_seconds=0.0)

    assert scheduler.start([_job("/a"), _job("/b")]) == 2
    assert _wait_for(lambda: tick.count(0) >= 3 and tick.count(1) >= 3)

    scheduler.stop()
    assert scheduler.wait(timeout=5.0)
    settled = len(tick.calls)
    time.sleep(0.15)
    assert len(tick.calls) == settled


def test_first_pass_waits_one_period() -> None:
    tick = TickRecorder()
    scheduler = AuditScheduler(tick, poll_minutes=0.3 / 60, stagger_seconds=0.0)

    started = time.monotonic()
    scheduler.start([_job()])
    assert _wait_for(lambda: tick.count(0) >= 1)
    scheduler.stop()
    scheduler.wait(timeout=5.0)

    assert tick.calls[0][1] - started >= 0.25


def test_stop_during_start_offset_skips_all_passes() -> None:
    tick = TickRecorder()
    scheduler = AuditScheduler(tick, poll_minutes=FAST_POLL, stagger_seconds=60.0)

    scheduler.start([_job(), _job()])
    assert _wait_for(lambda: tick.count(0) >= 1)
    scheduler.stop()

    assert scheduler.wait(timeout=5.0)
    assert tick.count(1) == 0


def test_slow_pass_never_overlaps_next() -> None:
    tick = TickRecorder(delay=0.12)
    scheduler = AuditScheduler(tick, poll_minutes=FAST_POLL, stagger_seconds=0.0)

    scheduler.start([_job()])
    assert _wait_for(lambda: tick.count(0) >= 3)
    scheduler.stop()
    scheduler.wait(timeout=5.0)

    assert tick.max_active == 1
    starts = [t for _, t in tick.calls]
    assert all(b - a >= 0.1 for a, b in zip(starts, starts[1:]))


def test_failing_pass_does_not_end_the_loop() -> None:
    calls: list[int] = []

    def tick(job: AuditJob, job_no: int) -> None:
        calls.append(job_no)
        raise RuntimeError("boom")

    scheduler = AuditScheduler(tick, poll_minutes=FAST_POLL, stagger_seconds=0.0)
    scheduler.start([_job()])

    assert _wait_for(lambda: len(calls) >= 2)
    scheduler.stop()
    assert scheduler.wait(timeout=5.0)


def test_shared_stop_event_is_honoured() -> None:
    stop = threading.Event()
    scheduler = AuditScheduler(TickRecorder(), poll_minutes=FAST_POLL, stop_event=stop)
    scheduler.start([_job()])

    stop.set()

    assert scheduler.stopped
    assert scheduler.wait(timeout=5.0)


def test_wait_times_out_while_jobs_run() -> None:
    scheduler = AuditScheduler(TickRecorder(), poll_minutes=1)
    scheduler.start([_job()])
    try:
        assert scheduler.wait(timeout=0.05) is False
    finally:
        scheduler.stop()
        scheduler.wait(timeout=5.0)


def test_runner_detects_then_dispatches(tmp_path: Path) -> None:
    job = AuditJob(
        plan=AuditPlan(kind="d", path=str(tmp_path)),
        baseline=(FileSnapshot(path=str(tmp_path / "gone.txt"), mtime_ns=1),),
    )
    dispatcher = DummyDispatcher()
    runner = AuditRunner(ChangeDetector(), dispatcher)  # type: ignore[arg-type]

    alerts = runner(job, 4)

    assert len(alerts) == 1
    assert dispatcher.batches == [alerts]
