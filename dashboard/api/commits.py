"""
Commit Feed API
===============
POST /api/upload_commits
    Appends commits announced by the VCS feed to the Commit Ledger.

POST /api/commit_poll
    Runs reconciliation over every bug still waiting on a fix-commit hash,
    then returns the titles that are still unresolved so the feed knows what
    to look for. Safe to call any number of times, in any order relative to
    status updates and uploads.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dashboard.api.http_errors import to_http_exception
from dashboard.core.errors import DashboardError
from dashboard.models.commit import Commit
from dashboard.state.dashboard_state import DashboardState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Commits"])


class CommitIn(BaseModel):
    hash: str
    title: str
    repo: str = ""
    branch: str = ""
    author: str = ""
    date: Optional[datetime] = None


class UploadCommitsRequest(BaseModel):
    commits: List[CommitIn]


class UploadCommitsResponse(BaseModel):
    added: int


class CommitPollResponse(BaseModel):
    commits: List[str]
    resolved: int


@router.post("/upload_commits", response_model=UploadCommitsResponse)
async def upload_commits(request: UploadCommitsRequest, state: DashboardState = Depends(get_state)):
    try:
        added = state.ledger.append(Commit(**c.model_dump()) for c in request.commits)
    except DashboardError as exc:
        raise to_http_exception(exc)
    return UploadCommitsResponse(added=added)


@router.post("/commit_poll", response_model=CommitPollResponse)
async def commit_poll(state: DashboardState = Depends(get_state)):
    try:
        resolved = state.state_machine.reconcile_pending()
    except DashboardError as exc:
        raise to_http_exception(exc)
    pending = state.state_machine.pending_fix_titles()
    logger.info("[API] Commit poll: %d resolved, %d title(s) pending", resolved, len(pending))
    return CommitPollResponse(commits=pending, resolved=resolved)
