"""Expiry sweeper: periodically deletes classes whose end time has passed.

A single worker thread runs one sweep, then waits for the next period.
Sweeps never overlap: the wait only starts once the previous sweep has
committed, and a lock serialises manual ``sweep_once()`` calls against
the background thread.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from config.schema import SweeperConfig
from services.errors import SchedulerError
from services.repository import SessionRepository

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Recurring purge of expired classes."""

    def __init__(
        self,
        repository: SessionRepository,
        config: SweeperConfig,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.repository = repository
        self.interval = config.interval_seconds
        self.shutdown_timeout = config.shutdown_timeout_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.sweep_count = 0
        self.last_deleted = 0

    # ─── One sweep ───

    def sweep_once(self, now: Optional[datetime] = None) -> int:
        """Deletes every class ending strictly before ``now`` (default: local time).

        Returns the number of deleted classes.
        """
        with self._lock:
            now = now or self._clock()
            deleted = self.repository.delete_expired(now)
            self.sweep_count += 1
            self.last_deleted = deleted
        if deleted:
            logger.info(f"Sweep {self.sweep_count}: {deleted} expired class(es) deleted")
        else:
            logger.debug(f"Sweep {self.sweep_count}: nothing expired")
        return deleted

    # ─── Background thread ───

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Starts the background thread. The first sweep runs immediately."""
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, name="expiry-sweeper", daemon=True
        )
        self._thread.start()
        logger.info(f"Expiry sweeper started (every {self.interval}s)")

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                self.sweep_once()
            except SchedulerError as e:
                # Storage failures end this sweep only; the next one retries the rows
                logger.error(f"Sweep failed: {e}")
            except Exception:
                logger.exception("Sweep failed unexpectedly")
            self._stop.wait(self.interval)

    def stop(self, timeout: Optional[float] = None) -> bool:
        """Cancels the timer and waits for a running sweep to finish.

        Returns False if the sweep did not finish within ``timeout``.
        """
        if self._thread is None:
            return True
        self._stop.set()
        self._thread.join(timeout if timeout is not None else self.shutdown_timeout)
        finished = not self._thread.is_alive()
        if finished:
            logger.info("Expiry sweeper stopped")
            self._thread = None
        else:
            logger.warning("Expiry sweeper did not stop within the timeout")
        return finished

    def __enter__(self) -> "ExpirySweeper":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()
