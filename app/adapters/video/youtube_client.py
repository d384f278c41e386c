"""YouTube Data API search client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.errors import UpstreamServiceError
from app.schemas.video import VideoItem

logger = logging.getLogger(__name__)


class YouTubeClient:
    """Thin async wrapper around the ``/search`` endpoint.

    Attributes:
        base_url: API root, e.g. ``https://www.googleapis.com/youtube/v3``.
        timeout_seconds: Total timeout applied to each request.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def search(
        self,
        query: str,
        *,
        max_results: int,
        course_id: str | None = None,
    ) -> list[VideoItem]:
        """Search for videos matching ``query``.

        Raises:
            UpstreamServiceError: On timeout (504) or a failed/invalid
                response from the API (502).
        """
        params = {
            "part": "snippet",
            "q": query,
            "maxResults": str(max_results),
            "type": "video",
            "key": self._api_key,
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.get("/search", params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.TimeoutException as exc:
            logger.warning("video_search.timeout", extra={"timeout_s": self.timeout_seconds})
            raise UpstreamServiceError(
                code="video_search_timeout",
                message="Video search timed out",
                details={"http_status": 504},
            ) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "video_search.upstream_error",
                extra={"upstream_status": exc.response.status_code},
            )
            raise UpstreamServiceError(
                code="video_search_failed",
                message="Failed to fetch video data",
                details={"context": {"upstream_status": exc.response.status_code}},
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise UpstreamServiceError(
                code="video_search_failed",
                message="Failed to fetch video data",
            ) from exc

        return [self._to_item(item, course_id) for item in payload.get("items", []) if _has_video_id(item)]

    @staticmethod
    def _to_item(item: dict[str, Any], course_id: str | None) -> VideoItem:
        snippet = item.get("snippet", {})
        thumbnails = snippet.get("thumbnails", {})
        thumbnail = (thumbnails.get("medium") or thumbnails.get("default") or {}).get("url")
        return VideoItem(
            id=item["id"]["videoId"],
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            thumbnail=thumbnail,
            channel_title=snippet.get("channelTitle", ""),
            published_at=snippet.get("publishedAt"),
            course_id=course_id,
        )


def _has_video_id(item: dict[str, Any]) -> bool:
    return isinstance(item.get("id"), dict) and bool(item["id"].get("videoId"))
