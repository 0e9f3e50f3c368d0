"""
Panel Poller

Runs each dashboard refresh job on its own interval in a single background
thread, using threading.Event for efficient sleep/wake with clean shutdown
support.

Default jobs and intervals:
    clock           1 s
    left_panel     30 s   weather, bird activity
    detections     30 s   recent detection list
    right_panel   300 s   daily stats, species, direction data
    direction_plot  1 s   radar plot refresh
    history       300 s   detection history page
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Upper bound on a single wait so clock drift cannot stall the loop
MAX_WAIT_SECONDS = 60.0


@dataclass
class PollJob:
    name: str
    interval: float
    func: Callable[[], None]
    next_run: float = 0.0
    runs: int = 0
    failures: int = 0


class PanelPoller:
    """
    Schedules periodic panel refresh jobs.

    A failing job is logged and retried on its next interval; it never
    stops the loop or the other jobs. Jobs run once immediately on start.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._jobs: dict[str, PollJob] = {}
        self._lock = threading.Lock()

        # Shutdown signal and early wake-up for refresh()
        self._shutdown = threading.Event()
        self._wake = threading.Event()
        self._thread: threading.Thread | None = None

    def add_job(self, name: str, interval: float, func: Callable[[], None]) -> None:
        if interval <= 0:
            raise ValueError(f"Interval for '{name}' must be > 0, got {interval}")
        with self._lock:
            self._jobs[name] = PollJob(name=name, interval=interval, func=func)

    @property
    def jobs(self) -> dict[str, PollJob]:
        with self._lock:
            return dict(self._jobs)

    def start(self) -> None:
        """Start the poller thread if any jobs are registered."""
        if not self._jobs:
            logger.debug("No poll jobs registered")
            return

        logger.info(f"Starting panel poller with {len(self._jobs)} job(s)")
        for job in self._jobs.values():
            logger.info(f"  - {job.name}: every {job.interval:g}s")

        self._shutdown.clear()
        self._thread = threading.Thread(target=self._run, name="PanelPoller", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal shutdown and wait briefly for the thread to exit."""
        if not self._thread:
            return

        logger.debug("Stopping panel poller...")
        self._shutdown.set()
        self._wake.set()

        self._thread.join(timeout=2.0)

        if self._thread.is_alive():
            logger.warning("Panel poller did not stop cleanly")
        else:
            logger.debug("Panel poller stopped")
        self._thread = None

    def refresh(self, name: str) -> None:
        """Run a job as soon as possible instead of waiting for its interval."""
        with self._lock:
            job = self._jobs.get(name)
            if job is None:
                raise KeyError(f"Unknown poll job: {name}")
            job.next_run = 0.0
        self._wake.set()

    def run_once(self) -> None:
        """Run every job once, in registration order."""
        for job in list(self.jobs.values()):
            self._run_job(job)

    def run_due(self) -> float:
        """
        Run the jobs that are due.

        Returns:
            Seconds until the next job is due
        """
        now = self._clock()
        for job in list(self.jobs.values()):
            # Reschedule before running so a refresh() during the run sticks
            with self._lock:
                due = job.next_run <= now
                if due:
                    job.next_run = now + job.interval
            if due:
                self._run_job(job)

        with self._lock:
            if not self._jobs:
                return MAX_WAIT_SECONDS
            next_due = min(job.next_run for job in self._jobs.values())
        return max(0.0, min(next_due - self._clock(), MAX_WAIT_SECONDS))

    def _run_job(self, job: PollJob) -> None:
        try:
            job.func()
            job.runs += 1
        except Exception as e:
            job.failures += 1
            logger.error(f"Poll job '{job.name}' failed: {e}", exc_info=True)

    def _run(self) -> None:
        """Main loop: run due jobs, then sleep until the next one or a wake-up."""
        while not self._shutdown.is_set():
            wait = self.run_due()
            if self._shutdown.is_set():
                break
            self._wake.wait(timeout=wait)
            self._wake.clear()

        logger.debug("Panel poller loop exited")
