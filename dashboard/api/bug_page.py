"""
Bug Page API
============
GET /bug?extid=<extid>&json=1   — bug document by external id
GET /bug?id=<key>&json=1        — bug document by internal key
GET /text?tag=<Tag>&x=<token>   — raw text of a stored artifact

Only the JSON representation is served (json=1). A bug that does not exist
answers 404 with a `null` JSON body, keeping the content type of the
contract.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from dashboard.api.http_errors import to_http_exception
from dashboard.core.constants import JSON_CONTENT_TYPE
from dashboard.core.errors import DashboardError, NotFoundError
from dashboard.core.json_projection import render_bug
from dashboard.state.dashboard_state import DashboardState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Read API"])

NOT_FOUND_BODY = b"null"


def require_json(json: int) -> None:
    if not json:
        raise HTTPException(status_code=406, detail="Only JSON output is served, pass json=1")


@router.get("/bug")
async def bug_page(
    extid: Optional[str] = None,
    id: Optional[str] = None,
    json: int = 0,
    state: DashboardState = Depends(get_state),
):
    require_json(json)
    bug_id = extid or id
    if not bug_id:
        raise HTTPException(status_code=400, detail="Either extid or id is required")
    try:
        bug = state.bugs.get(bug_id)
    except NotFoundError:
        logger.info("[API] Bug %s not found", bug_id)
        return Response(content=NOT_FOUND_BODY, status_code=404, media_type=JSON_CONTENT_TYPE)
    return Response(content=render_bug(bug), media_type=JSON_CONTENT_TYPE)


@router.get("/text")
async def text_artifact(tag: str, x: str, state: DashboardState = Depends(get_state)):
    try:
        data = state.artifacts.load(tag, x)
    except DashboardError as exc:
        raise to_http_exception(exc)
    return Response(content=data, media_type="text/plain; charset=utf-8")
