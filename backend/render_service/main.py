import asyncio
import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from render_service.api.v1 import health, render
from render_service.core.config import Settings, settings as default_settings
from render_service.core.errors import RenderServiceException, log_loop_exception
from render_service.core.logging_config import configure_logging
from render_service.services.executor import Renderer, RenderExecutor
from render_service.services.ffmpeg import render_video
from render_service.services.job_store import JobStore
from render_service.services.reclaimer import Reclaimer

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, renderer: Optional[Renderer] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title=settings.PROJECT_NAME)

    job_store = JobStore()
    reclaimer = Reclaimer(
        job_store,
        ttl_seconds=settings.JOB_TTL_SECONDS,
        interval_seconds=settings.CLEANUP_INTERVAL_SECONDS,
    )
    executor = RenderExecutor(
        job_store,
        renderer or render_video,
        reclaimer=reclaimer,
        max_workers=settings.RENDER_WORKERS,
    )

    app.state.settings = settings
    app.state.job_store = job_store
    app.state.reclaimer = reclaimer
    app.state.executor = executor

    @app.on_event("startup")
    async def on_startup():
        asyncio.get_running_loop().set_exception_handler(log_loop_exception)
        try:
            os.makedirs(settings.TEMP_DIR, exist_ok=True)
        except OSError as e:
            logger.error(f"temp dir error: {e}")
        reclaimer.start()
        logger.info(f"{settings.PROJECT_NAME} ready, temp dir {settings.TEMP_DIR}")

    @app.on_event("shutdown")
    def on_shutdown():
        logger.info("shutting down: stopping reclaimer, abandoning in-flight renders")
        reclaimer.stop()
        executor.shutdown(wait=False)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        client = request.client.host if request.client else "-"
        logger.info(f"{request.method} {request.url.path} from {client}")
        return await call_next(request)

    @app.exception_handler(RenderServiceException)
    async def render_service_exception_handler(request: Request, exc: RenderServiceException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})

    # permissive cors for the render server
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(render.router, tags=["render"])

    return app


configure_logging(default_settings.LOG_LEVEL, default_settings.LOG_DIR)
app = create_app()
