"""
Blog Posts API: Landing Page Route
===================================

Serves the static HTML landing page at `/`.
The file location comes from settings.landing_page_path.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from blog_api.exceptions import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])


@router.get(
    "/",
    response_class=FileResponse,
    summary="Landing page",
    include_in_schema=False,
)
async def landing_page(request: Request) -> FileResponse:
    landing_page_path = request.app.state.settings.landing_page_path
    if not landing_page_path.is_file():
        logger.error("Landing page missing at %s", landing_page_path)
        raise NotFoundError(resource="page", resource_id="/")

    return FileResponse(path=str(landing_page_path), media_type="text/html")
