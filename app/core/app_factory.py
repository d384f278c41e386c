"""Application factory for the FastAPI app.

Builds the shared collaborators (admission limiter, LLM client, video search)
once per application and keeps them on ``app.state`` so tests can create
isolated apps.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.adapters.llm.factory import create_llm_client
from app.adapters.rate_limit.in_memory import InMemorySlidingWindowRateLimiter
from app.adapters.video.youtube_client import YouTubeClient
from app.api.routes import assessments_router, health_router, videos_router
from app.core.config import Settings, settings as default_settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.rate_limit import build_rate_limiter
from app.services.assessment_service import AssessmentService
from app.services.video_service import VideoSearchService
from app.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    limiter: InMemorySlidingWindowRateLimiter = app.state.rate_limiter
    limiter.start_sweeper()
    logger.info(
        "rate_limit.sweeper_started",
        extra={
            "window_s": limiter.window_seconds,
            "max_tracked": limiter.max_tracked_clients,
        },
    )
    try:
        yield
    finally:
        limiter.stop_sweeper()


def _build_assessment_service(cfg: Settings) -> AssessmentService:
    if not cfg.llm.api_key:
        logger.warning("assessment.disabled", extra={"reason": "llm_api_key_missing"})
        return AssessmentService(llm=None)
    return AssessmentService(llm=create_llm_client(cfg.llm))


def _build_video_service(cfg: Settings) -> VideoSearchService:
    client = None
    if cfg.video.api_key:
        client = YouTubeClient(
            api_key=cfg.video.api_key,
            base_url=cfg.video.base_url,
            timeout_seconds=cfg.video.timeout_seconds,
        )
    else:
        logger.warning("video_search.disabled", extra={"reason": "api_key_missing"})

    cache = SimpleTTLCache(
        ttl_seconds=cfg.video.cache_ttl_seconds,
        max_entries=cfg.video.cache_max_entries,
    )
    return VideoSearchService(client=client, cache=cache)


def create_app(cfg: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Raises:
        InvalidConfigurationError: If the limiter or LLM settings are unusable.
    """
    cfg = cfg or default_settings

    configure_logging(cfg.log)

    app = FastAPI(
        title="MindCourse API",
        description=(
            "AI-assisted wellbeing self-assessment and course video lookup. "
            "Gated endpoints enforce a per-client sliding-window request quota "
            "and answer 429 when it is exhausted."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        lifespan=lifespan,
    )

    app.state.rate_limiter = build_rate_limiter(cfg.app)
    app.state.assessment_service = _build_assessment_service(cfg)
    app.state.video_service = _build_video_service(cfg)

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(assessments_router, prefix="/v1")
    app.include_router(videos_router, prefix="/v1")
    app.include_router(health_router)

    return app
