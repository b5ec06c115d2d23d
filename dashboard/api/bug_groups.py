"""
Bug Group API
GET /{namespace}?json=1        — open bugs of a namespace
GET /{namespace}/fixed?json=1  — fixed bugs of a namespace

Groups are computed on read. A namespace no build was uploaded for answers
404 with a `null` body; a known namespace with no matching bugs renders
`"Bugs": null`.

This router must be registered last: its path parameter matches any
single-segment path.
"""
import logging

from fastapi import APIRouter, Depends, Response

from dashboard.api.bug_page import NOT_FOUND_BODY, require_json
from dashboard.core.constants import JSON_CONTENT_TYPE, BugStatus
from dashboard.core.json_projection import render_group
from dashboard.state.dashboard_state import DashboardState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Read API"])


def _group_response(state: DashboardState, namespace: str, status: str) -> Response:
    if namespace not in state.builds.namespaces():
        logger.info("[API] Unknown namespace %s", namespace)
        return Response(content=NOT_FOUND_BODY, status_code=404, media_type=JSON_CONTENT_TYPE)
    bugs = state.bugs.list(namespace=namespace, status=status)
    return Response(content=render_group(bugs), media_type=JSON_CONTENT_TYPE)


@router.get("/{namespace}")
async def open_bugs(namespace: str, json: int = 0, state: DashboardState = Depends(get_state)):
    require_json(json)
    return _group_response(state, namespace, BugStatus.OPEN)


@router.get("/{namespace}/fixed")
async def fixed_bugs(namespace: str, json: int = 0, state: DashboardState = Depends(get_state)):
    require_json(json)
    return _group_response(state, namespace, BugStatus.FIXED)
