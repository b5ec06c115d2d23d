"""
Engine error → HTTP status mapping shared by the routers.

    NotFoundError          → 404
    InvalidInputError      → 400
    TransientStorageError  → 503 (caller retries)

Details are made safe for the UTF-8 response body: an unknown id that
carried a lone surrogate must not turn a 404 into a 500.
"""
import logging

from fastapi import HTTPException

from dashboard.core.errors import (
    InvalidInputError,
    DashboardError,
    NotFoundError,
    TransientStorageError,
)

logger = logging.getLogger(__name__)


def _detail(exc: DashboardError) -> str:
    return str(exc).encode("utf-8", "backslashreplace").decode("utf-8")


def to_http_exception(exc: DashboardError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=_detail(exc))
    if isinstance(exc, InvalidInputError):
        return HTTPException(status_code=400, detail=_detail(exc))
    if isinstance(exc, TransientStorageError):
        logger.warning("[API] Transient storage failure: %s", _detail(exc))
        return HTTPException(status_code=503, detail=f"Storage unavailable, retry: {_detail(exc)}")
    logger.error("[API] Unhandled dashboard error: %s", _detail(exc), exc_info=True)
    return HTTPException(status_code=500, detail=_detail(exc))
