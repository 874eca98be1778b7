import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

from render_service.core.errors import DuplicateJobError, InvalidTransitionError, JobNotFoundError
from render_service.models import Job, JobStatus

logger = logging.getLogger(__name__)


class JobStore:
    """
    in-memory job records, the single source of truth for job state

    every read and write goes through one lock. records are frozen and
    replaced wholesale, so a reader never sees a half-applied transition.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        self.clock = clock

    def create(self, job_id: str) -> Job:
        """insert a new record in processing state"""
        with self._lock:
            if job_id in self._jobs:
                raise DuplicateJobError(f"job {job_id} already exists")
            job = Job(job_id=job_id, created_at=self.clock())
            self._jobs[job_id] = job
            return job

    def get(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def set_completed(self, job_id: str, output_path: str) -> Job:
        """mark a job as completed"""
        if not output_path:
            raise ValueError("output_path is required to complete a job")
        return self._transition(job_id, status=JobStatus.COMPLETED, output_path=output_path)

    def set_error(self, job_id: str, message: str) -> Job:
        """mark a job as failed"""
        return self._transition(job_id, status=JobStatus.ERROR, error_message=message or "render failed")

    def list_all(self) -> List[Tuple[str, Job]]:
        with self._lock:
            return list(self._jobs.items())

    def remove(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.pop(job_id, None)

    def count_by_status(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in JobStatus}
        with self._lock:
            for job in self._jobs.values():
                counts[job.status.value] += 1
        return counts

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _transition(self, job_id: str, **changes) -> Job:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                raise JobNotFoundError(f"job {job_id} not found")
            if job.is_terminal:
                raise InvalidTransitionError(
                    f"job {job_id} is already {job.status.value}, cannot move to {changes['status'].value}"
                )
            updated = job.model_copy(update={**changes, "finished_at": self.clock()})
            self._jobs[job_id] = updated
            return updated
