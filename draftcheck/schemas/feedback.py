"""
Feedback Schemas: Request and Response Models

Pydantic models for the two preview endpoints:
  POST /feedback/preview     fast heuristic tier
  POST /feedback/preview/ai  slow AI tier

Both endpoints share one request body and one response body.
The wire format is camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Tier(str, Enum):
    """Which analyzer pipeline produced a result."""
    FAST = "FAST"
    SLOW = "SLOW"


class FeedbackType(str, Enum):
    FALLACY = "FALLACY"
    INFLAMMATORY = "INFLAMMATORY"
    UNSOURCED = "UNSOURCED"
    BIAS = "BIAS"
    AFFIRMATION = "AFFIRMATION"


class SensitivityLevel(str, Enum):
    """User-selected sensitivity. Higher levels show only surer feedback."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def threshold(self) -> float:
        return CONFIDENCE_THRESHOLDS[self]


# Monotonic: LOW < MEDIUM < HIGH
CONFIDENCE_THRESHOLDS: dict[SensitivityLevel, float] = {
    SensitivityLevel.LOW: 0.5,
    SensitivityLevel.MEDIUM: 0.7,
    SensitivityLevel.HIGH: 0.85,
}


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PreviewRequest(_WireModel):
    """Request body shared by both tiers."""
    content: str
    sensitivity: Optional[SensitivityLevel] = None
    discussion_id: Optional[str] = None
    topic_id: Optional[str] = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class FeedbackItem(_WireModel):
    """One piece of feedback. Produced only by an analyzer."""
    type: FeedbackType
    subtype: Optional[str] = None
    suggestion_text: str
    reasoning: str = ""
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    educational_resources: Optional[Any] = None
    should_display: bool = True


class AnalysisResult(_WireModel):
    """One completed analyzer response, stamped with the tier that produced it."""
    feedback: list[FeedbackItem] = Field(default_factory=list)
    primary: Optional[FeedbackItem] = None
    ready_to_post: bool = True
    summary: str = ""
    analysis_time_ms: int = 0
    source: Tier = Tier.FAST
