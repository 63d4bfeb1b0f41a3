"""
DraftCheck: live argument-quality feedback while a response is typed.

Two analyzers run behind HTTP endpoints: a fast heuristic tier and a
slow AI tier. This package coordinates them for one draft: debouncing,
caching, merging without flicker, sensitivity filtering and a single
ready-to-post signal that fails open.

Public API:
  - HybridFeedbackCoordinator: the two-tier coordinator
  - MergedView / ContentSnapshot: what callers read and what gets analyzed
  - get_client: analyzer client factory (HTTP)
  - ResultCache: stale-while-revalidate result cache
  - filter_feedback / evaluate: sensitivity filter and readiness evaluator
  - SqlitePreferenceStore / MemoryPreferenceStore: persisted sensitivity

Usage:
    from draftcheck import HybridFeedbackCoordinator, get_client, Tier
    from draftcheck import SqlitePreferenceStore
"""

__version__ = "1.0.0"

from draftcheck.schemas.feedback import (
    AnalysisResult,
    FeedbackItem,
    FeedbackType,
    SensitivityLevel,
    Tier,
)
from draftcheck.models import ContentSnapshot, MergedView, TierState
from draftcheck.errors import (
    AnalyzerError,
    ContentTooShort,
    RateLimited,
    RequestFailed,
    ServiceUnavailable,
    Unauthorized,
    ValidationFailed,
)
from draftcheck.sensitivity import filter_feedback, threshold
from draftcheck.readiness import evaluate
from draftcheck.cache import ResultCache
from draftcheck.analyzers import AnalyzerClient
from draftcheck.analyzers.factory import get_client
from draftcheck.preferences import (
    MemoryPreferenceStore,
    PreferenceStore,
    SqlitePreferenceStore,
)
from draftcheck.coordinator import HybridFeedbackCoordinator

__all__ = [
    "AnalysisResult",
    "FeedbackItem",
    "FeedbackType",
    "SensitivityLevel",
    "Tier",
    "ContentSnapshot",
    "MergedView",
    "TierState",
    "AnalyzerError",
    "ContentTooShort",
    "RateLimited",
    "RequestFailed",
    "ServiceUnavailable",
    "Unauthorized",
    "ValidationFailed",
    "filter_feedback",
    "threshold",
    "evaluate",
    "ResultCache",
    "AnalyzerClient",
    "get_client",
    "MemoryPreferenceStore",
    "PreferenceStore",
    "SqlitePreferenceStore",
    "HybridFeedbackCoordinator",
]
