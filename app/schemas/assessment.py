"""Pydantic schemas for questionnaire analysis."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class QuestionResponse(BaseModel):
    """One answered questionnaire item."""

    question: str = Field(..., description="Question shown to the user.")
    answer: str = Field(..., description="The user's free-text or selected answer.")

    @field_validator("question", "answer")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value


class AnalyseResponsesRequest(BaseModel):
    """Body of ``POST /v1/assessments/analyse``."""

    responses: list[QuestionResponse] = Field(
        ...,
        min_length=1,
        description="Answered questionnaire items, in the order they were asked.",
    )


class AssessmentResult(BaseModel):
    """Structured self-assessment produced by the model."""

    overall_assessment: str = Field(
        ...,
        min_length=1,
        description="Short supportive summary of the user's current state.",
    )
    key_observations: list[str] = Field(
        default_factory=list,
        description="Notable patterns in the answers.",
    )
    self_care_suggestions: list[str] = Field(
        default_factory=list,
        description="General wellbeing and self-care ideas.",
    )


class AnalyseResponsesResponse(BaseModel):
    """Response of ``POST /v1/assessments/analyse``."""

    assessment: AssessmentResult
    disclaimer: str = Field(
        ...,
        description="Reminder that the output is not a clinical diagnosis.",
    )
    source: Literal["ai-generated"] = "ai-generated"
