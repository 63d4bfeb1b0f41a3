"""Wire schemas for the preview analyzer endpoints."""

from draftcheck.schemas.feedback import (
    AnalysisResult,
    FeedbackItem,
    FeedbackType,
    PreviewRequest,
    SensitivityLevel,
    Tier,
)

__all__ = [
    "AnalysisResult",
    "FeedbackItem",
    "FeedbackType",
    "PreviewRequest",
    "SensitivityLevel",
    "Tier",
]
