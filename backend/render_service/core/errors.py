import logging
import sys
import threading

logger = logging.getLogger(__name__)


class RenderServiceException(Exception):
    """base exception for render-service errors"""
    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class PayloadTooLargeError(RenderServiceException):
    """raised when a render request body exceeds the configured cap"""
    status_code = 413


class InvalidPayloadError(RenderServiceException):
    """raised when a render request body is not valid json"""
    status_code = 400


class JobNotFoundError(RenderServiceException):
    """raised when a job id is unknown or already reclaimed"""
    status_code = 404


class DuplicateJobError(RenderServiceException):
    status_code = 500


class InvalidTransitionError(RenderServiceException):
    """raised when a terminal job is asked to change status again"""
    status_code = 409


class DispatchError(RenderServiceException):
    """raised when a job cannot be handed to the render executor"""
    status_code = 500


class RenderError(RenderServiceException):
    """raised by the renderer; only ever recorded on the job"""
    pass


def handle_worker_error(job_id: str, error: BaseException):
    """
    centralized error handler for background render jobs
    logs the failure; the job record carries the message for polling clients
    """
    logger.error(f"job {job_id} failed: {error}", exc_info=error)


def install_exception_hooks():
    """
    log otherwise-uncaught failures instead of losing them

    covers the main thread and any background thread (reclaimer, render workers)
    """
    def _log_uncaught(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        logger.critical("CRITICAL RENDER SERVER ERROR", exc_info=(exc_type, exc_value, exc_tb))

    def _log_thread_uncaught(args):
        if args.exc_type is SystemExit:
            return
        thread_name = args.thread.name if args.thread else "unknown"
        logger.critical(
            f"CRITICAL RENDER SERVER ERROR in thread {thread_name}",
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = _log_uncaught
    threading.excepthook = _log_thread_uncaught


def log_loop_exception(loop, context):
    """asyncio loop exception handler; logs and keeps the loop running"""
    error = context.get("exception")
    message = context.get("message", "unhandled event loop error")
    if error is not None:
        logger.critical(f"CRITICAL RENDER SERVER ERROR: {message}", exc_info=error)
    else:
        logger.critical(f"CRITICAL RENDER SERVER ERROR: {message}")
