"""
Merge / Precedence Resolver

Combines the fast and slow tiers into one MergedView for the current
ContentSnapshot:

  1. A slow (AI) result for the current snapshot is authoritative.
  2. Otherwise a fast result for the current snapshot is used.
  3. Otherwise the last result shown under the same sensitivity and
     context stays up as a placeholder, so the view does not blank
     between keystrokes.
  4. Otherwise nothing: empty feedback, ready to post.

A result only counts as "for the current snapshot" by identity, never
by arrival order, so a late answer to old text can not overwrite a
newer one. Errors are per tier; one tier failing never hides the
other tier's result, and no failure ever blocks posting.
"""

from __future__ import annotations

from typing import Optional

from draftcheck.errors import AnalyzerError, ServiceUnavailable
from draftcheck.models import ContentSnapshot, MergedView, TierState, TierStatus
from draftcheck.readiness import evaluate
from draftcheck.schemas.feedback import AnalysisResult, SensitivityLevel, Tier
from draftcheck.sensitivity import filter_feedback, filter_primary

UNABLE_TO_ANALYZE = "Unable to analyze content. You can still post."


def _placeholder(
    current: ContentSnapshot,
    fast: TierStatus,
    slow: TierStatus,
) -> Optional[AnalysisResult]:
    """Most recently settled result that shares the current settings."""
    candidates = [
        s for s in (fast, slow)
        if s.result is not None and current.same_settings(s.snapshot)
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda s: s.sequence).result


def _user_error(status: TierStatus, current: ContentSnapshot) -> Optional[Exception]:
    """The tier's error for the current snapshot, unless it is a silent degradation."""
    error = status.error_for(current)
    if error is None or isinstance(error, ServiceUnavailable):
        return None
    return error


def _message(error: Exception) -> str:
    if isinstance(error, AnalyzerError):
        return error.message
    return str(error)


def resolve(
    current: Optional[ContentSnapshot],
    fast: TierStatus,
    slow: TierStatus,
    *,
    sensitivity: SensitivityLevel = SensitivityLevel.MEDIUM,
    is_content_valid: bool = True,
) -> MergedView:
    """Build the view for `current` from the two tiers' bookkeeping."""
    if current is None or not is_content_valid:
        return MergedView(
            is_content_valid=False,
            sensitivity=current.sensitivity if current else sensitivity,
        )

    slow_current = slow.result_for(current)
    fast_current = fast.result_for(current)
    if slow_current is not None:
        active = slow_current
    elif fast_current is not None:
        active = fast_current
    else:
        active = _placeholder(current, fast, slow)

    is_fast_loading = fast.state is TierState.IN_FLIGHT
    is_slow_loading = slow.state is TierState.IN_FLIGHT

    errors = [e for e in (_user_error(fast, current), _user_error(slow, current)) if e]
    error_message = None
    if errors:
        if active is None and not (is_fast_loading or is_slow_loading):
            error_message = UNABLE_TO_ANALYZE
        else:
            error_message = _message(errors[0])

    if active is None:
        return MergedView(
            is_fast_loading=is_fast_loading,
            is_slow_loading=is_slow_loading,
            error=error_message,
            is_error=bool(errors),
            is_content_valid=True,
            sensitivity=current.sensitivity,
        )

    visible = filter_feedback(active.feedback, current.sensitivity)
    readiness = evaluate(visible, active)
    return MergedView(
        feedback=tuple(visible),
        primary=filter_primary(active.primary, current.sensitivity),
        ready_to_post=readiness.ready_to_post,
        summary=readiness.summary,
        is_fast_loading=is_fast_loading,
        is_slow_loading=is_slow_loading,
        is_ai_feedback=active.source is Tier.SLOW,
        error=error_message,
        is_error=bool(errors),
        is_content_valid=True,
        sensitivity=current.sensitivity,
        analysis_time_ms=active.analysis_time_ms,
    )
