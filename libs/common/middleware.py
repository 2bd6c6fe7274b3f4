"""Request tracing middleware.

Every request gets a request id (taken from ``X-Request-ID`` or generated)
that is attached to all log records emitted while it is handled and echoed
back on the response together with the handling time.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

# Polled by load balancers; logging them drowns out real traffic
QUIET_PATH_SUFFIXES = ("/health",)


def _is_quiet(path: str) -> bool:
    return path.endswith(QUIET_PATH_SUFFIXES)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds request id, path and method to the logging context."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        quiet = _is_quiet(request.url.path)
        started = time.perf_counter()

        if not quiet:
            logger.info(
                "Request started",
                extra={
                    "extra_fields": {
                        "query": str(request.url.query) or None,
                        "language": request.headers.get("Accept-Language"),
                    }
                },
            )

        try:
            response = await call_next(request)
            duration_ms = _elapsed_ms(started)
            if not quiet:
                # Rejections (4xx) are expected outcomes but still worth a warning
                level = "warning" if response.status_code >= 400 else "info"
                getattr(logger, level)(
                    "Request completed",
                    extra={
                        "extra_fields": {
                            "status_code": response.status_code,
                            "duration_ms": duration_ms,
                        }
                    },
                )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time-Ms"] = str(duration_ms)
            return response
        except Exception as exc:
            logger.exception(
                "Request failed with unhandled exception",
                extra={"extra_fields": {"error": str(exc), "duration_ms": _elapsed_ms(started)}},
            )
            raise
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI) -> None:
    """Configure logging and install ``RequestContextMiddleware`` on ``app``."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware)
    logger.info("Observability middleware initialized")
