"""Poll cycle scheduling.

Fires the poll cycle on a fixed wall-clock interval and provides the
per-tenant locks that keep overlapping cycles from processing the same
tenant at once.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any


logger = logging.getLogger(__name__)


# Five minutes, aligned to the wall clock like cron's "*/5 * * * *"
DEFAULT_INTERVAL_SECONDS = 300


class TenantLocks:
    """Per-tenant mutual exclusion for poll cycles.

    A cycle holds a tenant's lock for the whole read-filter-dispatch-write
    sequence. A second cycle reaching a held tenant does not wait; it skips
    the tenant, which the holder is already processing.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def _lock_for(self, tenant_id: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(tenant_id)
            if lock is None:
                lock = self._locks[tenant_id] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, tenant_id: str) -> Iterator[bool]:
        """Try to take a tenant's lock without blocking.

        Yields:
            True if the lock was acquired, False if another cycle holds it
        """
        lock = self._lock_for(tenant_id)
        acquired = lock.acquire(blocking=False)
        try:
            yield acquired
        finally:
            if acquired:
                lock.release()

    def is_held(self, tenant_id: str) -> bool:
        """Returns True if some cycle is processing the tenant."""
        return self._lock_for(tenant_id).locked()


class PollScheduler:
    """Recurring trigger for poll cycles.

    Each firing runs the cycle in its own worker thread, so a slow cycle
    never delays the next firing; cycles may overlap and rely on
    TenantLocks for per-tenant exclusion.
    """

    def __init__(
        self,
        run_cycle: Callable[[], Any],
        interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize scheduler.

        Args:
            run_cycle: Callable running one complete poll cycle
            interval_seconds: Seconds between firings
            clock: Wall-clock source in epoch seconds
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")

        self.run_cycle = run_cycle
        self.interval_seconds = interval_seconds
        self.clock = clock
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._active_lock = threading.Lock()
        self._active_cycles = 0

    @property
    def active_cycles(self) -> int:
        """Number of cycles currently running."""
        with self._active_lock:
            return self._active_cycles

    def seconds_until_next_run(self) -> float:
        """Seconds until the next interval boundary of the wall clock."""
        return self.interval_seconds - (self.clock() % self.interval_seconds)

    def _run_cycle_safely(self) -> None:
        with self._active_lock:
            self._active_cycles += 1
        try:
            self.run_cycle()
        except Exception:
            logger.exception("Poll cycle failed")
        finally:
            with self._active_lock:
                self._active_cycles -= 1

    def fire(self) -> threading.Thread:
        """Start one poll cycle in a worker thread.

        Returns:
            The worker thread
        """
        if self.active_cycles:
            logger.warning(
                "Starting poll cycle while %d earlier cycle(s) still running",
                self.active_cycles,
            )

        worker = threading.Thread(
            target=self._run_cycle_safely,
            name="poll-cycle",
            daemon=True,
        )
        worker.start()
        return worker

    def run_forever(self) -> None:
        """Fire cycles at every interval boundary until stop() is called."""
        logger.info("Poll scheduler started, interval %ds", self.interval_seconds)

        while not self._stop.wait(self.seconds_until_next_run()):
            self.fire()

        logger.info("Poll scheduler stopped")

    def start(self) -> None:
        """Run the scheduler loop in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run_forever,
            name="poll-scheduler",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop firing new cycles. Running cycles are not cancelled."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
