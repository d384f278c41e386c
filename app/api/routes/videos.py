from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response

from app.core.config import settings
from app.core.rate_limit import enforce_rate_limit
from app.schemas.video import VideoSearchResponse
from app.services.video_service import VideoSearchService

router = APIRouter(tags=["Videos"])


def get_video_service(request: Request) -> VideoSearchService:
    return request.app.state.video_service


@router.get(
    "/videos/search",
    response_model=VideoSearchResponse,
    dependencies=[Depends(enforce_rate_limit("lookup"))],
    responses={429: {"description": "Too many requests from this client"}},
)
async def search_videos(
    response: Response,
    q: str = Query(..., min_length=1, description="Search query"),
    max_results: int | None = Query(None, ge=1, le=25, description="Number of videos to return"),
    course_id: str | None = Query(None, description="Course the videos are recommended for"),
    service: VideoSearchService = Depends(get_video_service),
) -> VideoSearchResponse:
    """Find educational videos for a course topic."""
    result = await service.search(
        q,
        max_results=max_results or settings.video.default_max_results,
        course_id=course_id,
    )
    response.headers["Cache-Control"] = "max-age=3600, s-maxage=3600"
    return result
