import asyncio
import inspect
import logging
import os
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, List, Optional

from render_service.core.errors import (
    DispatchError,
    InvalidTransitionError,
    JobNotFoundError,
    RenderError,
    handle_worker_error,
)
from render_service.services.job_store import JobStore
from render_service.services.reclaimer import Reclaimer

logger = logging.getLogger(__name__)

# renderer(payload, work_dir) -> path of the finished file; may also be async
Renderer = Callable[[Any, str], Any]


class RenderExecutor:
    """runs renders off the request path and reports outcomes into the job store"""

    def __init__(
        self,
        store: JobStore,
        renderer: Renderer,
        reclaimer: Optional[Reclaimer] = None,
        max_workers: int = 4,
    ):
        self.store = store
        self.renderer = renderer
        self.reclaimer = reclaimer
        self.max_workers = max_workers
        self._queue: "queue.Queue[Optional[tuple]]" = queue.Queue()
        self._workers: List[threading.Thread] = []
        self._lock = threading.Lock()
        self._shutdown = False

    def execute(self, job_id: str, payload: Any, work_dir: str) -> Future:
        """start a render and return immediately"""
        future: Future = Future()
        with self._lock:
            if self._shutdown:
                raise DispatchError(f"could not dispatch job {job_id}: executor is shut down")
            self._queue.put((future, job_id, payload, work_dir))
            if len(self._workers) < self.max_workers:
                self._spawn_worker()
        return future

    def shutdown(self, wait: bool = False):
        """
        stop taking work; queued renders are cancelled and running ones abandoned

        workers are daemon threads, so a render in flight never holds up process exit
        """
        with self._lock:
            self._shutdown = True
            workers = list(self._workers)
        while True:
            try:
                item = self._queue.get_nowait()
            except queue.Empty:
                break
            if item is not None:
                item[0].cancel()
        for _ in workers:
            self._queue.put(None)
        if wait:
            for worker in workers:
                worker.join()

    def _spawn_worker(self):
        worker = threading.Thread(
            target=self._worker_loop,
            name=f"render_{len(self._workers)}",
            daemon=True,
        )
        self._workers.append(worker)
        worker.start()

    def _worker_loop(self):
        while True:
            item = self._queue.get()
            if item is None:
                return
            future, job_id, payload, work_dir = item
            if not future.set_running_or_notify_cancel():
                continue
            try:
                self._run(job_id, payload, work_dir)
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(None)

    def _run(self, job_id: str, payload: Any, work_dir: str):
        logger.info(f"job started: {job_id}")
        try:
            output_path = self._render(payload, work_dir)
            if not output_path or not os.path.exists(output_path):
                raise RenderError(f"renderer reported {output_path!r} but no file was produced")
        except Exception as e:
            handle_worker_error(job_id, e)
            self._record(self.store.set_error, job_id, str(e) or e.__class__.__name__)
            return

        if self._record(self.store.set_completed, job_id, str(output_path)):
            job = self.store.get(job_id)
            if job and job.finished_at:
                logger.info(f"job completed: {job_id} in {job.finished_at - job.created_at:.1f}s")
        elif self.reclaimer is not None:
            # record was reclaimed mid-render; nobody can download this file now
            self.reclaimer.discard(str(output_path))

    def _render(self, payload: Any, work_dir: str):
        if inspect.iscoroutinefunction(self.renderer):
            return asyncio.run(self.renderer(payload, work_dir))
        result = self.renderer(payload, work_dir)
        if inspect.isawaitable(result):
            async def _await():
                return await result
            return asyncio.run(_await())
        return result

    def _record(self, setter: Callable[[str, str], Any], job_id: str, value: str) -> bool:
        try:
            setter(job_id, value)
            return True
        except JobNotFoundError:
            logger.warning(f"job {job_id} was reclaimed before its render finished, dropping result")
        except InvalidTransitionError as e:
            logger.warning(str(e))
        return False
