"""Questionnaire analysis service.

Turns a list of answered questions into a short, supportive self-assessment
using the configured LLM. The service:
- bounds and sanitises user input before it reaches the prompt
- asks the model for a fixed JSON shape and validates it
- always returns a not-a-diagnosis disclaimer alongside the result
"""

from __future__ import annotations

import logging
import re

from pydantic import ValidationError

from app.adapters.llm.base import AbstractLLMClient
from app.core.config import settings
from app.core.errors import LLMAppError, ValidationAppError
from app.schemas.assessment import (
    AnalyseResponsesResponse,
    AssessmentResult,
    QuestionResponse,
)

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "This assessment is not a clinical diagnosis and should not replace professional "
    "mental health advice. If you're experiencing significant distress, please consult "
    "with a qualified mental health professional."
)

_TAG_RE = re.compile(r"<[^>]*>?")


def sanitize_text(text: str, max_chars: int) -> str:
    """Strip HTML-like tags and truncate to ``max_chars``."""
    return _TAG_RE.sub("", text[:max_chars]).strip()


def build_prompt(responses: list[QuestionResponse]) -> str:
    formatted = "\n\n".join(f"Question: {r.question}\nAnswer: {r.answer}" for r in responses)
    return f"""
Review these answers to a wellbeing questionnaire. Do not diagnose, name
conditions or suggest medication. Reply with JSON:
{{"overall_assessment": str, "key_observations": [str], "self_care_suggestions": [str]}}

{formatted}
""".strip()


class AssessmentService:
    """Analyse questionnaire responses with an LLM.

    Attributes:
        llm: LLM client adapter, or None when no provider is configured.
    """

    def __init__(self, llm: AbstractLLMClient | None) -> None:
        self.llm = llm

    def _prepare(self, responses: list[QuestionResponse]) -> list[QuestionResponse]:
        max_items = settings.app.max_responses
        if len(responses) > max_items:
            raise ValidationAppError(
                code="too_many_responses",
                message=f"At most {max_items} responses can be analysed at once",
                details={"limit": max_items},
            )

        max_chars = settings.app.max_response_chars
        cleaned = [
            QuestionResponse.model_construct(
                question=sanitize_text(r.question, max_chars),
                answer=sanitize_text(r.answer, max_chars),
            )
            for r in responses
        ]
        if any(not r.question or not r.answer for r in cleaned):
            raise ValidationAppError(
                code="invalid_responses",
                message="Each response must contain question and answer as non-empty strings",
                details={"field": "responses"},
            )
        return cleaned

    async def analyse(self, responses: list[QuestionResponse]) -> AnalyseResponsesResponse:
        """Produce an assessment for ``responses``.

        Raises:
            ValidationAppError: If the responses are empty after sanitising
                or exceed the configured count.
            LLMAppError: If the model fails or its output does not match
                the expected shape.
        """
        cleaned = self._prepare(responses)
        if self.llm is None:
            raise LLMAppError(
                code="llm_not_configured",
                message="Assessment generation is not configured",
                details={"http_status": 500, "hint": "Set LLM_API_KEY"},
            )

        raw = await self.llm.generate_json(
            build_prompt(cleaned),
            schema=AssessmentResult.model_json_schema(),
        )

        try:
            result = AssessmentResult.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "assessment.invalid_model_output",
                extra={"error_count": exc.error_count()},
            )
            raise LLMAppError(
                code="llm_invalid_output",
                message="Failed to generate a valid assessment",
            ) from exc

        logger.info(
            "assessment.generated",
            extra={
                "response_count": len(cleaned),
                "observation_count": len(result.key_observations),
            },
        )
        return AnalyseResponsesResponse(assessment=result, disclaimer=DISCLAIMER)
