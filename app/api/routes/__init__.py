from __future__ import annotations

from app.api.routes.assessments import router as assessments_router
from app.api.routes.health import router as health_router
from app.api.routes.videos import router as videos_router

__all__ = ["assessments_router", "health_router", "videos_router"]
