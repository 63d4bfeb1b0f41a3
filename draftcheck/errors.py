"""
Analyzer error taxonomy.

Every failure an analyzer client surfaces is one of these. The
coordinator keys its fail-open behavior off the type, never off
message text.

  Unauthorized       401  surfaced verbatim, never retried
  ValidationFailed   400  server message passed through, never retried
  RateLimited        429  carries retry_after seconds
  ServiceUnavailable 503  slow tier only; means "keep showing the fast tier"
  RequestFailed      anything else (5xx, network, malformed body)
"""

from __future__ import annotations

from typing import Optional

from draftcheck.schemas.feedback import Tier


class ContentTooShort(ValueError):
    """Raised locally; content below the minimum length never reaches the network."""

    def __init__(self, length: int, minimum: int):
        super().__init__(
            f"Content must be at least {minimum} characters (got {length})."
        )
        self.length = length
        self.minimum = minimum


class AnalyzerError(Exception):
    """Base for every error an analyzer tier surfaces."""

    transient = False

    def __init__(
        self,
        message: str,
        tier: Tier,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.tier = tier
        self.status_code = status_code


class Unauthorized(AnalyzerError):
    def __init__(self, tier: Tier, message: str = "Authentication required."):
        super().__init__(message, tier, status_code=401)


class ValidationFailed(AnalyzerError):
    def __init__(self, tier: Tier, message: str):
        super().__init__(message, tier, status_code=400)


class RateLimited(AnalyzerError):
    def __init__(self, tier: Tier, retry_after: float):
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded. Retry after {int(round(retry_after))} seconds.",
            tier,
            status_code=429,
        )


class ServiceUnavailable(AnalyzerError):
    def __init__(self, tier: Tier, message: str = "AI analysis temporarily unavailable."):
        super().__init__(message, tier, status_code=503)


class RequestFailed(AnalyzerError):
    """Network errors, 5xx and malformed bodies. Only the first two are transient."""

    @property
    def transient(self) -> bool:
        return self.status_code is None or self.status_code >= 500
