"""
POST /api/job_done
Completion event from the bisection runner.

The job type and text are validated up front (400 on an unknown type or on
text that is not UTF-8). Linking runs as a background task after the
response: the runner only needs to know the event was accepted, and the
linker retries and logs on its own.

A job is conclusive when it reports exactly one commit and no error; any
other outcome is recorded as inconclusive.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel

from dashboard.api.http_errors import to_http_exception
from dashboard.core.errors import DashboardError
from dashboard.engine.bisection_linker import BisectionLinker, resolve_job_kind
from dashboard.models.commit import BisectCommit
from dashboard.state.dashboard_state import DashboardState, get_state
from dashboard.utils.text import require_utf8

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Jobs"])


class JobCommit(BaseModel):
    hash: str
    title: str


class JobDoneRequest(BaseModel):
    id: str
    bug_id: str
    type: str
    commits: List[JobCommit] = []
    repo: str = ""
    branch: str = ""
    error: str = ""


class JobDoneResponse(BaseModel):
    accepted: bool
    conclusive: bool


def _commit_info(request: JobDoneRequest) -> Optional[BisectCommit]:
    if request.error or len(request.commits) != 1:
        return None
    commit = request.commits[0]
    return BisectCommit(hash=commit.hash, title=commit.title, repo=request.repo, branch=request.branch)


def _link(linker: BisectionLinker, job_id: str, bug_id: str, job_type: str, info: Optional[BisectCommit]) -> None:
    try:
        linked = linker.on_job_complete(bug_id, job_type, info)
    except DashboardError as exc:
        logger.error("[API] Job %s: failed to link result to bug %s: %s", job_id, bug_id, exc)
        return
    logger.info("[API] Job %s: result %s", job_id, "linked" if linked else "dropped")


@router.post("/job_done", response_model=JobDoneResponse)
async def job_done(
    request: JobDoneRequest,
    background_tasks: BackgroundTasks,
    state: DashboardState = Depends(get_state),
):
    try:
        resolve_job_kind(request.type)
        require_utf8(request.model_dump())
    except DashboardError as exc:
        raise to_http_exception(exc)

    info = _commit_info(request)
    if request.error:
        logger.warning("[API] Job %s for bug %s finished with error: %s", request.id, request.bug_id, request.error)
    background_tasks.add_task(_link, state.linker, request.id, request.bug_id, request.type, info)
    return JobDoneResponse(accepted=True, conclusive=info is not None)
