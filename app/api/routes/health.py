from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check; never rate limited.

    Also reports how many client keys the admission limiter currently holds,
    which is handy when tuning the tracked-clients cap.
    """

    return {
        "status": "ok",
        "tracked_clients": request.app.state.rate_limiter.tracked_clients,
    }
