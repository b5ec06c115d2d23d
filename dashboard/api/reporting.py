"""
Reporting API
=============
POST /api/reporting_poll_bugs
    Hands out open bugs that have not been reported yet and marks them
    reported. Each report carries the extid the reporter uses afterwards.

POST /api/reporting_update
    Status update from the reporter: new status plus the titles of the
    commits believed to fix the bug. Drives BugStateMachine.apply_status_update.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dashboard.api.http_errors import to_http_exception
from dashboard.core.constants import BugStatus
from dashboard.core.errors import DashboardError, NotFoundError
from dashboard.core.json_projection import bug_link
from dashboard.state.dashboard_state import DashboardState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reporting"])


class BugReportItem(BaseModel):
    id: str
    title: str
    namespace: str
    link: str
    kernel_config_link: str
    num_crashes: int


class PollBugsResponse(BaseModel):
    reports: List[BugReportItem]


class BugUpdate(BaseModel):
    id: str
    status: str
    fix_commits: List[str] = []


class BugUpdateResponse(BaseModel):
    ok: bool
    status: str
    fix_commits: int


@router.post("/reporting_poll_bugs", response_model=PollBugsResponse)
async def reporting_poll_bugs(state: DashboardState = Depends(get_state)):
    reports: List[BugReportItem] = []
    for candidate in state.bugs.list(status=BugStatus.OPEN):
        if candidate.reported:
            continue
        try:
            with state.bugs.transaction(candidate.key) as bug:
                # Another poll may have claimed it since the listing.
                if bug.reported:
                    continue
                bug.reported = True
        except NotFoundError:
            continue
        last_crash = bug.crashes[-1]
        reports.append(BugReportItem(
            id=bug.extid,
            title=bug.title,
            namespace=bug.namespace,
            link=bug_link(bug.extid),
            kernel_config_link=last_crash.build.kernel_config.url,
            num_crashes=bug.num_crashes,
        ))
    if reports:
        logger.info("[API] Reporting poll handed out %d bug(s)", len(reports))
    return PollBugsResponse(reports=reports)


@router.post("/reporting_update", response_model=BugUpdateResponse)
async def reporting_update(update: BugUpdate, state: DashboardState = Depends(get_state)):
    try:
        bug = state.state_machine.apply_status_update(update.id, update.status, update.fix_commits)
    except DashboardError as exc:
        raise to_http_exception(exc)
    return BugUpdateResponse(ok=True, status=bug.status, fix_commits=len(bug.fix_commits))
