"""
Analyzer Client: Abstract Interface

Both tiers go through this interface. The fast tier fronts the
heuristic analyzer, the slow tier the AI analyzer; the coordinator
never cares which implementation sits behind either.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from draftcheck.errors import ContentTooShort
from draftcheck.models import ContentSnapshot
from draftcheck.schemas.feedback import AnalysisResult, Tier


class AnalyzerClient(ABC):
    """Abstract base for analyzer clients."""

    tier: Tier
    min_content_length: int = 20

    def accepts(self, snapshot: ContentSnapshot) -> bool:
        """Whether the snapshot is long enough to be worth sending."""
        return len(snapshot.text) >= self.min_content_length

    def validate(self, snapshot: ContentSnapshot) -> None:
        if not self.accepts(snapshot):
            raise ContentTooShort(len(snapshot.text), self.min_content_length)

    @abstractmethod
    async def analyze(self, snapshot: ContentSnapshot) -> AnalysisResult:
        """Analyze one snapshot.

        Raises:
            ContentTooShort: before any network traffic.
            AnalyzerError: one of the typed failures in draftcheck.errors.
        """
        ...

    async def aclose(self) -> None:
        """Release any resources held by the client."""
        return None
