"""Video search adapters."""

from app.adapters.video.youtube_client import YouTubeClient

__all__ = ["YouTubeClient"]
