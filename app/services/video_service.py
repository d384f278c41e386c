"""Educational video lookup with result caching."""

from __future__ import annotations

import logging

from app.adapters.video.youtube_client import YouTubeClient
from app.core.errors import UpstreamServiceError
from app.schemas.video import VideoSearchResponse
from app.utils.simple_cache import SimpleTTLCache, build_cache_key

logger = logging.getLogger(__name__)


class VideoSearchService:
    """Search videos, serving repeated searches from the TTL cache."""

    def __init__(self, client: YouTubeClient | None, cache: SimpleTTLCache) -> None:
        self.client = client
        self.cache = cache

    async def search(
        self,
        query: str,
        *,
        max_results: int,
        course_id: str | None = None,
    ) -> VideoSearchResponse:
        """Return videos for ``query``.

        Raises:
            UpstreamServiceError: If no API key is configured (500) or the
                upstream API fails.
        """
        cache_key = build_cache_key(query, max_results, course_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("video_search.cache_hit", extra={"result_count": len(cached)})
            return VideoSearchResponse(videos=cached, course_id=course_id, from_cache=True)

        if self.client is None:
            raise UpstreamServiceError(
                code="video_api_key_missing",
                message="Video search is not configured",
                details={"http_status": 500, "hint": "Set VIDEO_API_KEY"},
            )

        videos = await self.client.search(query, max_results=max_results, course_id=course_id)
        self.cache.set(cache_key, videos)
        logger.info("video_search.fetched", extra={"result_count": len(videos)})
        return VideoSearchResponse(videos=videos, course_id=course_id)
