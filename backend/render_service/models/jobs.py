from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class JobStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class Job(BaseModel):
    """one render job; the store swaps whole records instead of mutating them"""
    model_config = ConfigDict(frozen=True)

    job_id: str
    status: JobStatus = JobStatus.PROCESSING
    output_path: Optional[str] = None  # only when completed
    error_message: Optional[str] = None  # only when error
    created_at: float  # epoch seconds at submission, drives expiry
    finished_at: Optional[float] = None

    @property
    def is_terminal(self) -> bool:
        return self.status != JobStatus.PROCESSING

    def age(self, now: float) -> float:
        return now - self.created_at


class RenderAccepted(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")


class JobStatusResponse(BaseModel):
    status: JobStatus
    error: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
