from fastapi import Request
from render_service.core.config import Settings
from render_service.core.errors import JobNotFoundError
from render_service.models import Job
from render_service.services.executor import RenderExecutor
from render_service.services.job_store import JobStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_executor(request: Request) -> RenderExecutor:
    return request.app.state.executor


def get_valid_job(job_id: str, request: Request) -> Job:
    job = get_job_store(request).get(job_id)
    if not job:
        raise JobNotFoundError("Not Found")
    return job
