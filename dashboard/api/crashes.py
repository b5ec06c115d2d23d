"""
POST /api/report_crash
Accepts one crash from a fuzzing manager and files it under its Bug.

Malformed descriptors are rejected by the request model (422) before the
ingestor runs. Text that is not UTF-8 is 400 and an unknown build is 404. A
storage outage is 503 and nothing is recorded, so the manager can simply
re-send the crash.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dashboard.api.http_errors import to_http_exception
from dashboard.core.errors import DashboardError
from dashboard.models.crash import CrashDescriptor
from dashboard.state.dashboard_state import DashboardState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Crashes"])


class ReportCrashResponse(BaseModel):
    bug_id: str
    created: bool


@router.post("/report_crash", response_model=ReportCrashResponse)
async def report_crash(request: CrashDescriptor, state: DashboardState = Depends(get_state)):
    try:
        ref = state.ingestor.ingest(request)
    except DashboardError as exc:
        raise to_http_exception(exc)
    return ReportCrashResponse(bug_id=ref.extid, created=ref.created)
