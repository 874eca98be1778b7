from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from datetime import datetime, timezone

from render_service.api.dependencies import get_job_store, get_settings
from render_service.core.config import Settings
from render_service.services.job_store import JobStore
from render_service.services.reclaimer import get_directory_size

router = APIRouter()

HEALTH_MESSAGE = "Render Server Online"

@router.api_route("/", methods=["GET", "HEAD"], response_class=PlainTextResponse)
def root_check():
    """liveness probe for load balancers hitting the site root"""
    return HEALTH_MESSAGE

@router.get("/health", response_class=PlainTextResponse)
def health_check():
    """basic liveness check"""
    return HEALTH_MESSAGE

@router.get("/health/metrics")
def get_metrics(store: JobStore = Depends(get_job_store), settings: Settings = Depends(get_settings)):
    """job counts and temp storage usage"""
    jobs = store.count_by_status()
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "jobs": {
            **jobs,
            "total": sum(jobs.values()),
        },
        "storage": {
            "temp_dir": settings.TEMP_DIR,
            "temp_bytes": get_directory_size(settings.TEMP_DIR),
        },
    }
