"""
Core value types shared by the coordinator, the resolver and the cache.

  - ContentSnapshot: immutable (text, sensitivity, context) request identity
  - TierState / TierStatus: per-tier lifecycle as seen by the resolver
  - MergedView: the single externally observable state
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from draftcheck.schemas.feedback import (
    AnalysisResult,
    FeedbackItem,
    PreviewRequest,
    SensitivityLevel,
    Tier,
)


@dataclass(frozen=True)
class ContentSnapshot:
    """The exact text sent to an analyzer, with the settings active at that moment."""

    text: str
    sensitivity: SensitivityLevel = SensitivityLevel.MEDIUM
    discussion_id: Optional[str] = None
    topic_id: Optional[str] = None

    @property
    def identity(self) -> tuple:
        return (self.text, self.sensitivity.value, self.discussion_id, self.topic_id)

    def with_text(self, text: str) -> ContentSnapshot:
        return replace(self, text=text)

    def to_request(self) -> PreviewRequest:
        return PreviewRequest(
            content=self.text,
            sensitivity=self.sensitivity,
            discussion_id=self.discussion_id,
            topic_id=self.topic_id,
        )

    def same_settings(self, other: Optional[ContentSnapshot]) -> bool:
        """True when only the text differs."""
        return other is not None and (
            self.sensitivity is other.sensitivity
            and self.discussion_id == other.discussion_id
            and self.topic_id == other.topic_id
        )


class TierState(str, Enum):
    IDLE = "idle"
    NOT_APPLICABLE = "not_applicable"  # content below the minimum length
    PENDING = "pending"                # debounce timer running
    IN_FLIGHT = "in_flight"            # request for the current snapshot outstanding
    SETTLED = "settled"                # result or error for the latest snapshot


@dataclass
class TierStatus:
    """Mutable per-tier bookkeeping owned by one pipeline."""

    tier: Tier
    state: TierState = TierState.IDLE
    snapshot: Optional[ContentSnapshot] = None
    result: Optional[AnalysisResult] = None
    sequence: int = 0
    error: Optional[Exception] = None
    error_snapshot: Optional[ContentSnapshot] = None

    def result_for(self, current: Optional[ContentSnapshot]) -> Optional[AnalysisResult]:
        if current is not None and self.snapshot == current:
            return self.result
        return None

    def error_for(self, current: Optional[ContentSnapshot]) -> Optional[Exception]:
        if current is not None and self.error_snapshot == current:
            return self.error
        return None

    def accept(self, snapshot: ContentSnapshot, result: AnalysisResult, sequence: int) -> None:
        self.snapshot = snapshot
        self.result = result
        self.sequence = sequence
        if self.error_snapshot == snapshot:
            self.error = None
            self.error_snapshot = None

    def fail(self, snapshot: ContentSnapshot, error: Exception) -> None:
        self.error = error
        self.error_snapshot = snapshot


@dataclass(frozen=True)
class MergedView:
    """What the caller renders. Derived, never persisted."""

    feedback: tuple[FeedbackItem, ...] = ()
    primary: Optional[FeedbackItem] = None
    ready_to_post: bool = True
    summary: str = ""
    is_fast_loading: bool = False
    is_slow_loading: bool = False
    is_ai_feedback: bool = False
    error: Optional[str] = None
    is_error: bool = False
    is_content_valid: bool = False
    sensitivity: SensitivityLevel = SensitivityLevel.MEDIUM
    analysis_time_ms: int = 0

    @property
    def is_loading(self) -> bool:
        return self.is_fast_loading

    def to_dict(self) -> dict:
        return {
            "feedback": [f.model_dump(by_alias=True, mode="json") for f in self.feedback],
            "primary": (
                self.primary.model_dump(by_alias=True, mode="json")
                if self.primary else None
            ),
            "readyToPost": self.ready_to_post,
            "summary": self.summary,
            "isFastLoading": self.is_fast_loading,
            "isSlowLoading": self.is_slow_loading,
            "isAIFeedback": self.is_ai_feedback,
            "error": self.error,
            "isError": self.is_error,
            "isContentValid": self.is_content_valid,
            "sensitivity": self.sensitivity.value,
            "analysisTimeMs": self.analysis_time_ms,
        }
