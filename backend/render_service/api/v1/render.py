import json
import logging
import os
import uuid
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, PlainTextResponse

from render_service.api.dependencies import get_executor, get_job_store, get_settings, get_valid_job
from render_service.core.config import Settings
from render_service.core.errors import InvalidPayloadError, PayloadTooLargeError
from render_service.models import ErrorResponse, Job, JobStatus, JobStatusResponse, RenderAccepted
from render_service.services.executor import RenderExecutor
from render_service.services.job_store import JobStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_json_body(request: Request, max_bytes: int) -> Any:
    """read and parse the request body, refusing anything over max_bytes"""
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > max_bytes:
        raise PayloadTooLargeError(f"request entity too large (limit {max_bytes} bytes)")

    # chunked bodies carry no content-length, so count while streaming
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLargeError(f"request entity too large (limit {max_bytes} bytes)")

    try:
        payload = json.loads(body)
    except ValueError as e:
        raise InvalidPayloadError(f"malformed json body: {e}") from e

    if not isinstance(payload, (dict, list)):
        raise InvalidPayloadError("render request must be a json object or array")
    return payload


@router.post(
    "/render",
    response_model=RenderAccepted,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def submit_render(
    request: Request,
    store: JobStore = Depends(get_job_store),
    executor: RenderExecutor = Depends(get_executor),
    settings: Settings = Depends(get_settings),
):
    """accept a render job and return its id without waiting for the render"""
    payload = await read_json_body(request, settings.MAX_BODY_BYTES)

    job_id = str(uuid.uuid4())
    store.create(job_id)
    try:
        executor.execute(job_id, payload, settings.TEMP_DIR)
    except Exception:
        # never leave a record behind for a job that was not dispatched
        store.remove(job_id)
        raise

    logger.info(f"job queued: {job_id}")
    return RenderAccepted(job_id=job_id)


@router.get(
    "/status/{job_id}",
    response_model=JobStatusResponse,
    response_model_exclude_none=True,
    responses={404: {"model": ErrorResponse}},
)
def job_status(job: Job = Depends(get_valid_job)):
    return JobStatusResponse(status=job.status, error=job.error_message)


@router.get("/download/{job_id}")
def download_result(job_id: str, store: JobStore = Depends(get_job_store)):
    """serve the rendered file once the job has completed"""
    job = store.get(job_id)
    if (
        not job
        or job.status != JobStatus.COMPLETED
        or not job.output_path
        or not os.path.isfile(job.output_path)
    ):
        return PlainTextResponse("File not ready", status_code=404)

    return FileResponse(job.output_path, media_type="video/mp4", filename="video.mp4")
