"""
HTTP Analyzer Client: talks to the preview endpoints over httpx.

Features:
- One automatic retry on transient failures with a tier-specific delay
  (fast: 1s, slow: 2s)
- 429 handling: retried once only when Retry-After fits inside that
  delay, otherwise surfaced and the tier is held until Retry-After passes
- 503 from the slow tier surfaces as ServiceUnavailable so the
  coordinator can quietly fall back to the fast tier
- Bearer credential attached to every request
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

import httpx
from pydantic import ValidationError

from draftcheck.analyzers import AnalyzerClient
from draftcheck.errors import (
    AnalyzerError,
    RateLimited,
    RequestFailed,
    ServiceUnavailable,
    Unauthorized,
    ValidationFailed,
)
from draftcheck.logging import get_logger
from draftcheck.models import ContentSnapshot
from draftcheck.rate_limit import RetryAfterGate, parse_retry_after
from draftcheck.schemas.feedback import AnalysisResult, Tier

logger = get_logger("analyzers.http")

MAX_ATTEMPTS = 2  # the first try plus exactly one retry


def _error_message(response: httpx.Response, fallback: str) -> str:
    """Pull a human-readable message out of a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or fallback
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail") or body.get("error")
        if isinstance(msg, list):
            msg = "; ".join(str(m) for m in msg)
        if msg:
            return str(msg)
    return fallback


class HttpAnalyzerClient(AnalyzerClient):
    """Analyzer client for one tier's POST endpoint."""

    def __init__(
        self,
        tier: Tier,
        base_url: str,
        endpoint: str,
        token: str = "",
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        retry_delay: float = 1.0,
        timeout: Optional[float] = None,
        gate: Optional[RetryAfterGate] = None,
        min_content_length: int = 20,
    ):
        self.tier = tier
        self.url = base_url.rstrip("/") + endpoint
        self.endpoint = endpoint
        self.retry_delay = retry_delay
        self.min_content_length = min_content_length
        self.gate = gate or RetryAfterGate()
        self._token = token
        self._owns_client = http_client is None
        if http_client is None:
            http_client = (
                httpx.AsyncClient(timeout=timeout) if timeout is not None
                else httpx.AsyncClient()
            )
        self._client = http_client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _post_once(self, snapshot: ContentSnapshot) -> AnalysisResult:
        """One request, no retry. Maps every failure onto the error taxonomy."""
        payload = snapshot.to_request().to_payload()
        try:
            response = await self._client.post(
                self.url, json=payload, headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise RequestFailed(
                f"Request to {self.endpoint} failed: {e}", self.tier,
            ) from e

        status = response.status_code
        if status == 401:
            raise Unauthorized(self.tier, _error_message(response, "Authentication required."))
        if status == 400:
            raise ValidationFailed(self.tier, _error_message(response, "Invalid request."))
        if status == 429:
            raise RateLimited(self.tier, parse_retry_after(response.headers.get("Retry-After")))
        if status == 503 and self.tier is Tier.SLOW:
            raise ServiceUnavailable(self.tier)
        if not response.is_success:
            raise RequestFailed(
                _error_message(response, f"Failed to get feedback: HTTP {status}"),
                self.tier,
                status_code=status,
            )

        try:
            data = response.json()
            if not isinstance(data, dict):
                raise ValueError("response body is not an object")
            return AnalysisResult.model_validate({**data, "source": self.tier})
        except (ValueError, ValidationError) as e:
            raise RequestFailed(
                f"Malformed response from {self.endpoint}: {e}",
                self.tier,
                status_code=status,
            ) from e

    def _should_retry(self, error: AnalyzerError, attempt: int) -> bool:
        if attempt >= MAX_ATTEMPTS - 1:
            return False
        if isinstance(error, RateLimited):
            return error.retry_after <= self.retry_delay
        return error.transient

    async def analyze(self, snapshot: ContentSnapshot) -> AnalysisResult:
        self.validate(snapshot)

        held_for = self.gate.remaining(self.tier)
        if held_for > 0:
            raise RateLimited(self.tier, held_for)

        for attempt in range(MAX_ATTEMPTS):
            start = time.monotonic()
            try:
                result = await self._post_once(snapshot)
            except AnalyzerError as e:
                if self._should_retry(e, attempt):
                    logger.warning(
                        "Analyzer request failed (%s), retrying in %.1fs",
                        e.message, self.retry_delay,
                        extra={"tier": self.tier.value, "attempt": attempt + 1,
                               "status_code": e.status_code,
                               "error_type": type(e).__name__},
                    )
                    await asyncio.sleep(self.retry_delay)
                    continue
                if isinstance(e, RateLimited):
                    self.gate.block(self.tier, e.retry_after)
                logger.warning(
                    "Analyzer request failed: %s", e.message,
                    extra={"tier": self.tier.value, "attempt": attempt + 1,
                           "status_code": e.status_code,
                           "error_type": type(e).__name__,
                           "retry_after": getattr(e, "retry_after", None)},
                )
                raise

            logger.debug(
                "Analyzer request complete",
                extra={"tier": self.tier.value, "endpoint": self.endpoint,
                       "duration_ms": int((time.monotonic() - start) * 1000),
                       "content_length": len(snapshot.text)},
            )
            return result

        raise AssertionError("unreachable")  # pragma: no cover

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
