"""App lifecycle: rate-limit sweeper and shutdown on process-level failures."""

import asyncio
import contextlib
import logging
import os
import signal
import threading
from contextlib import asynccontextmanager

from api.dependencies import get_rate_limiter
from config import settings

logger = logging.getLogger(__name__)

_shutdown_requested = False


def request_shutdown(reason: str) -> None:
    """Ask the server for an orderly stop. uvicorn handles SIGTERM gracefully."""
    global _shutdown_requested
    if _shutdown_requested:
        return
    _shutdown_requested = True
    logger.critical("Shutting down gracefully after %s", reason)
    os.kill(os.getpid(), signal.SIGTERM)


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    exc = context.get("exception")
    if exc is None or isinstance(exc, (asyncio.CancelledError, ConnectionError)):
        loop.default_exception_handler(context)
        return
    logger.critical("Unhandled async exception: %s", context.get("message"), exc_info=exc)
    request_shutdown("unhandled async exception")


def handle_thread_exception(args: threading.ExceptHookArgs) -> None:
    if issubclass(args.exc_type, SystemExit):
        return
    logger.critical(
        "Uncaught exception in thread %s",
        args.thread.name if args.thread else "?",
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )
    request_shutdown("uncaught exception")


@asynccontextmanager
async def lifespan(app):
    loop = asyncio.get_running_loop()
    previous_loop_handler = loop.get_exception_handler()
    previous_thread_hook = threading.excepthook
    loop.set_exception_handler(handle_loop_exception)
    threading.excepthook = handle_thread_exception

    logger.info(
        "Profile Analyzer starting: rate limit %d req/min, %d req/hour; max file size %gMB; AI API %s",
        settings.rate_limit_per_minute,
        settings.rate_limit_per_hour,
        settings.max_file_size_mb,
        settings.gemini_api_url,
    )

    stop_event = asyncio.Event()
    sweeper = asyncio.create_task(
        get_rate_limiter().run_sweeper(
            stop_event, interval=settings.rate_limit_sweep_interval_seconds
        )
    )
    yield
    stop_event.set()
    if not sweeper.done():
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper

    loop.set_exception_handler(previous_loop_handler)
    threading.excepthook = previous_thread_hook
    logger.info("Profile Analyzer stopped")
