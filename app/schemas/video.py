"""Pydantic schemas for video search."""

from pydantic import BaseModel, Field


class VideoItem(BaseModel):
    """A single search hit, reduced to what the course pages display."""

    id: str = Field(..., description="YouTube video id.")
    title: str
    description: str = ""
    thumbnail: str | None = Field(None, description="Medium-size thumbnail URL.")
    channel_title: str = ""
    published_at: str | None = None
    course_id: str | None = Field(None, description="Course the search was made for.")


class VideoSearchResponse(BaseModel):
    """Response of ``GET /v1/videos/search``."""

    videos: list[VideoItem]
    course_id: str | None = None
    from_cache: bool = False
