import uvicorn
import time
import logging
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from dashboard.api.builds import router as builds_router
from dashboard.api.crashes import router as crashes_router
from dashboard.api.reporting import router as reporting_router
from dashboard.api.commits import router as commits_router
from dashboard.api.jobs import router as jobs_router
from dashboard.api.bug_page import router as bug_page_router
from dashboard.api.bug_groups import router as bug_groups_router
from dashboard.utils.logging_config import setup_logging

setup_logging()
logger = logging.getLogger("main")

app = FastAPI(title="Kernel Bug Dashboard API")


# ---------------------------------------------------------------------------
# Request Logging Middleware
# ---------------------------------------------------------------------------
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One line per request; 5xx answers and unhandled errors are logged louder."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("%s %s failed after %.2fms", request.method, target, _elapsed_ms(start))
            raise

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level, "%s %s → %d (%.2fms)",
            request.method, target, response.status_code, _elapsed_ms(start),
        )
        return response


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


app.add_middleware(RequestLoggingMiddleware)


# Health endpoint
@app.get("/health")
async def health_check():
    return {"status": "ok"}


# Register routers. The bug group router matches any "/{namespace}" path and
# has to come last.
app.include_router(builds_router)
app.include_router(crashes_router)
app.include_router(reporting_router)
app.include_router(commits_router)
app.include_router(jobs_router)
app.include_router(bug_page_router)
app.include_router(bug_groups_router)

if __name__ == "__main__":
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
