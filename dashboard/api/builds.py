"""
POST /api/upload_build
Registers build provenance. Idempotent: re-uploading a build id is a no-op.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dashboard.api.http_errors import to_http_exception
from dashboard.core.errors import DashboardError
from dashboard.models.build import BuildUpload
from dashboard.state.dashboard_state import DashboardState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Builds"])


class UploadBuildResponse(BaseModel):
    id: str
    namespace: str
    kernel_config: str


@router.post("/upload_build", response_model=UploadBuildResponse)
async def upload_build(request: BuildUpload, state: DashboardState = Depends(get_state)):
    try:
        build = state.builds.upload(request)
    except DashboardError as exc:
        raise to_http_exception(exc)
    return UploadBuildResponse(
        id=build.id,
        namespace=build.namespace,
        kernel_config=build.kernel_config.url,
    )
