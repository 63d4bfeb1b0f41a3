"""
Readiness Evaluator

Derives the single "ready to post" signal and the summary line.

Which feedback types block posting is the analyzer's decision, not
ours: the upstream readyToPost flag is trusted verbatim. With no
upstream result the draft is ready; pending or failed analysis
never blocks the user.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Sequence

from draftcheck.schemas.feedback import AnalysisResult, FeedbackItem


class Readiness(NamedTuple):
    ready_to_post: bool
    summary: str


def evaluate(
    filtered_feedback: Sequence[FeedbackItem],
    upstream: Optional[AnalysisResult] = None,
) -> Readiness:
    if upstream is None:
        return Readiness(ready_to_post=True, summary="")
    return Readiness(
        ready_to_post=bool(upstream.ready_to_post),
        summary=upstream.summary or "",
    )
