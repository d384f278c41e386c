from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from app.core.rate_limit import enforce_rate_limit
from app.schemas.assessment import AnalyseResponsesRequest, AnalyseResponsesResponse
from app.services.assessment_service import AssessmentService

router = APIRouter(tags=["Assessments"])


def get_assessment_service(request: Request) -> AssessmentService:
    return request.app.state.assessment_service


@router.post(
    "/assessments/analyse",
    response_model=AnalyseResponsesResponse,
    dependencies=[Depends(enforce_rate_limit("generation"))],
    responses={429: {"description": "Too many requests from this client"}},
)
async def analyse_responses(
    body: AnalyseResponsesRequest,
    response: Response,
    service: AssessmentService = Depends(get_assessment_service),
) -> AnalyseResponsesResponse:
    """Generate a self-assessment from questionnaire answers.

    Errors:
        400: empty, blank or too many responses.
        429: the caller exhausted the AI-generation quota.
        502/504: the AI service failed or timed out.
    """
    result = await service.analyse(body.responses)
    response.headers["Cache-Control"] = "private, no-cache, no-store, must-revalidate"
    return result
