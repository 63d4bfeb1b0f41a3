"""
Analyzer client factory: builds a tier's client from settings.
"""

from __future__ import annotations

from typing import Optional

import httpx

from draftcheck.analyzers import AnalyzerClient
from draftcheck.config import Settings, settings as default_settings, tier_config
from draftcheck.rate_limit import RetryAfterGate
from draftcheck.schemas.feedback import Tier


def get_client(
    tier: Tier,
    http_client: Optional[httpx.AsyncClient] = None,
    settings: Optional[Settings] = None,
    gate: Optional[RetryAfterGate] = None,
) -> AnalyzerClient:
    """Returns the configured analyzer client for a tier."""
    from draftcheck.analyzers.http import HttpAnalyzerClient

    settings = settings or default_settings
    cfg = tier_config(tier, settings)
    return HttpAnalyzerClient(
        tier=tier,
        base_url=settings.API_BASE_URL,
        endpoint=cfg.endpoint,
        token=settings.API_TOKEN,
        http_client=http_client,
        retry_delay=cfg.retry_delay,
        timeout=settings.HTTP_TIMEOUT,
        gate=gate,
        min_content_length=settings.MIN_CONTENT_LENGTH,
    )
