import logging
import os
import threading
from typing import Callable, Optional

from render_service.services.job_store import JobStore

logger = logging.getLogger(__name__)


def get_directory_size(path: str) -> int:
    """recursively calculate directory size in bytes"""
    total = 0
    try:
        for entry in os.scandir(path):
            if entry.is_file():
                total += entry.stat().st_size
            elif entry.is_dir():
                total += get_directory_size(entry.path)
    except OSError as e:
        logger.warning(f"error calculating size for {path}: {e}")
    return total


class Reclaimer:
    """evicts expired job records and deletes their output files"""

    def __init__(
        self,
        store: JobStore,
        ttl_seconds: float = 1800,
        interval_seconds: float = 1800,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self.interval_seconds = interval_seconds
        self._clock = clock or store.clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def sweep(self, now: Optional[float] = None) -> int:
        """
        reclaim every job older than the ttl, whatever its status
        returns: number of records removed
        """
        now = self._clock() if now is None else now
        reclaimed = 0

        for job_id, job in self.store.list_all():
            if job.age(now) <= self.ttl_seconds:
                continue
            # the live record may have completed since the snapshot was taken
            removed = self.store.remove(job_id)
            if removed is None:
                continue
            if removed.output_path:
                self.discard(removed.output_path)
            reclaimed += 1
            logger.info(f"reclaimed job {job_id} ({removed.status.value}, age {removed.age(now):.0f}s)")

        if reclaimed:
            logger.info(f"cleanup complete: reclaimed {reclaimed} jobs, {len(self.store)} remaining")
        return reclaimed

    def discard(self, path: str) -> bool:
        """best-effort file deletion; failures are logged, never raised"""
        try:
            if os.path.exists(path):
                os.remove(path)
                logger.debug(f"deleted render output: {path}")
                return True
        except OSError as e:
            logger.warning(f"error deleting {path}: {e}")
        return False

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="reclaimer", daemon=True)
        self._thread.start()
        logger.info(f"reclaimer started: ttl {self.ttl_seconds}s, every {self.interval_seconds}s")

    def stop(self, timeout: float = 5.0):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _run(self):
        # wait() returns True once stop() is called
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"cleanup sweep failed: {e}", exc_info=True)
