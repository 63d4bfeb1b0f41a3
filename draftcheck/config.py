"""
DraftCheck Configuration

Central settings loaded from environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from draftcheck.schemas.feedback import Tier

load_dotenv()


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    """Immutable application settings."""

    # --- Analyzer Service ---
    API_BASE_URL: str = os.getenv("DRAFTCHECK_API_BASE_URL", "http://localhost:3000")
    API_TOKEN: str = os.getenv("DRAFTCHECK_API_TOKEN", "")
    HTTP_TIMEOUT: Optional[float] = _optional_float("DRAFTCHECK_HTTP_TIMEOUT")
    ENABLE_AI: bool = os.getenv("DRAFTCHECK_ENABLE_AI", "true").lower() == "true"

    # --- Input ---
    MIN_CONTENT_LENGTH: int = int(os.getenv("DRAFTCHECK_MIN_CONTENT_LENGTH", "20"))

    # --- Fast tier (heuristic) ---
    FAST_DEBOUNCE_MS: int = int(os.getenv("DRAFTCHECK_FAST_DEBOUNCE_MS", "400"))
    FAST_RETRY_DELAY: float = float(os.getenv("DRAFTCHECK_FAST_RETRY_DELAY", "1.0"))
    FAST_STALE_AFTER: float = float(os.getenv("DRAFTCHECK_FAST_STALE_AFTER", "30"))
    FAST_EVICT_AFTER: float = float(os.getenv("DRAFTCHECK_FAST_EVICT_AFTER", "300"))

    # --- Slow tier (AI) ---
    SLOW_DEBOUNCE_MS: int = int(os.getenv("DRAFTCHECK_SLOW_DEBOUNCE_MS", "2500"))
    SLOW_RETRY_DELAY: float = float(os.getenv("DRAFTCHECK_SLOW_RETRY_DELAY", "2.0"))
    SLOW_STALE_AFTER: float = float(os.getenv("DRAFTCHECK_SLOW_STALE_AFTER", "120"))
    SLOW_EVICT_AFTER: float = float(os.getenv("DRAFTCHECK_SLOW_EVICT_AFTER", "600"))

    # --- Cache ---
    CACHE_MAX_ENTRIES: int = int(os.getenv("DRAFTCHECK_CACHE_MAX_ENTRIES", "500"))

    # --- Preferences ---
    PREFERENCES_DB: str = os.getenv("DRAFTCHECK_PREFERENCES_DB", "draftcheck_prefs.db")


settings = Settings()


@dataclass(frozen=True)
class TierConfig:
    """Per-tier timing and routing."""

    tier: Tier
    endpoint: str
    debounce_seconds: float
    retry_delay: float
    stale_after: float
    evict_after: float


ENDPOINTS = {
    Tier.FAST: "/feedback/preview",
    Tier.SLOW: "/feedback/preview/ai",
}


def tier_config(tier: Tier, source: Settings = settings) -> TierConfig:
    """Group the flat settings for one tier."""
    if tier is Tier.FAST:
        return TierConfig(
            tier=tier,
            endpoint=ENDPOINTS[tier],
            debounce_seconds=source.FAST_DEBOUNCE_MS / 1000,
            retry_delay=source.FAST_RETRY_DELAY,
            stale_after=source.FAST_STALE_AFTER,
            evict_after=source.FAST_EVICT_AFTER,
        )
    return TierConfig(
        tier=tier,
        endpoint=ENDPOINTS[tier],
        debounce_seconds=source.SLOW_DEBOUNCE_MS / 1000,
        retry_delay=source.SLOW_RETRY_DELAY,
        stale_after=source.SLOW_STALE_AFTER,
        evict_after=source.SLOW_EVICT_AFTER,
    )
