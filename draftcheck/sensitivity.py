"""
Sensitivity Filter

Maps the three-level sensitivity setting to a confidence threshold and
hides feedback below it. Pure: no side effects, no mutation.

    LOW    -> 0.5
    MEDIUM -> 0.7
    HIGH   -> 0.85

Because the thresholds are monotonic, filtering at a higher level always
yields a subset of filtering at a lower one.
"""

from __future__ import annotations

from typing import Iterable, Optional

from draftcheck.schemas.feedback import (
    CONFIDENCE_THRESHOLDS,
    FeedbackItem,
    SensitivityLevel,
)


def threshold(level: SensitivityLevel) -> float:
    return CONFIDENCE_THRESHOLDS[level]


def is_visible(item: FeedbackItem, min_confidence: float) -> bool:
    return item.should_display and item.confidence_score >= min_confidence


def filter_feedback(
    feedback: Iterable[FeedbackItem],
    level: SensitivityLevel,
) -> list[FeedbackItem]:
    """Keep items that are displayable and at least as confident as the level requires."""
    min_confidence = threshold(level)
    return [item for item in feedback if is_visible(item, min_confidence)]


def filter_primary(
    primary: Optional[FeedbackItem],
    level: SensitivityLevel,
) -> Optional[FeedbackItem]:
    """The primary item survives only if it would itself be shown."""
    if primary is None or not is_visible(primary, threshold(level)):
        return None
    return primary
