"""
file-notify - Per-job audit scheduling.

Each AuditJob gets its own daemon thread: it waits a staggered startup
offset, then runs one audit pass per poll period until the shared stop
event is set. A slow pass delays the next one; passes never overlap and
missed firings are dropped.
"""

import logging
import threading
import time
from typing import Callable, Iterable, Optional

from filenotify.core.detector import ChangeDetector
from filenotify.core.dispatcher import AlertDispatcher
from filenotify.core.models import AuditAlert, AuditJob, job_tag

logger = logging.getLogger(__name__)

DEFAULT_STAGGER_SECONDS = 30.0


class AuditRunner:
    """One audit pass: detect changes, then dispatch the resulting alerts."""

    def __init__(self, detector: ChangeDetector, dispatcher: AlertDispatcher) -> None:
        self.detector = detector
        self.dispatcher = dispatcher

    def __call__(self, job: AuditJob, job_no: int) -> list[AuditAlert]:
        alerts = self.detector.detect(job, job_no)
        self.dispatcher.dispatch(alerts)
        return alerts


class AuditScheduler:
    """
    Runs tick(job, job_no) for every job on a fixed period.

    Start with start(jobs); stop() sets the stop event and every job
    thread exits at its next wait.
    """

    def __init__(
        self,
        tick: Callable[[AuditJob, int], object],
        poll_minutes: float,
        stagger_seconds: float = DEFAULT_STAGGER_SECONDS,
        stop_event: Optional[threading.Event] = None,
        debug: bool = False,
    ) -> None:
        if poll_minutes <= 0:
            raise ValueError(f"poll interval must be positive, got {poll_minutes}")
        self.tick = tick
        self.period = poll_minutes * 60.0
        self.stagger_seconds = stagger_seconds
        self.stop_event = stop_event or threading.Event()
        self.debug = debug
        self._threads: list[threading.Thread] = []
        self._lock = threading.Lock()

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def start_offset(self, job_no: int) -> float:
        return job_no * self.stagger_seconds

    def run_job(self, job: AuditJob, job_no: int) -> None:
        """Audit loop for one job; returns only once the stop event is set."""
        tag = job_tag(job_no)
        offset = self.start_offset(job_no)
        if self.debug:
            logger.debug("%s watching %s", tag, job.plan.path)
            logger.debug("%s start offset %.0fs", tag, offset)
        if self.stop_event.wait(offset):
            return
        logger.info("%s entering audit loop", tag)

        next_fire = time.monotonic() + self.period
        while not self.stop_event.wait(max(0.0, next_fire - time.monotonic())):
            try:
                self.tick(job, job_no)
            except Exception as e:
                logger.exception("%s audit pass failed: %s", tag, e)
            now = time.monotonic()
            next_fire += self.period
            if next_fire <= now:
                # ticker semantics: drop firings missed during a slow pass
                missed = int((now - next_fire) // self.period) + 1
                next_fire += missed * self.period
        logger.info("%s audit loop stopped", tag)

    def start(self, jobs: Iterable[AuditJob]) -> int:
        """Launch one thread per job; return how many were started."""
        started = 0
        for job_no, job in enumerate(jobs):
            thread = threading.Thread(
                target=self.run_job,
                args=(job, job_no),
                daemon=True,
                name="file-notify-job-%d" % job_no,
            )
            # register before start so wait() never misses a running job
            with self._lock:
                self._threads.append(thread)
            thread.start()
            started += 1
        return started

    def stop(self) -> None:
        self.stop_event.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Join every started job thread.

        Returns True when all threads have exited, False if timeout elapsed first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
            if thread.is_alive():
                return False
        return True
