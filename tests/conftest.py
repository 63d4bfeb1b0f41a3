"""
Shared fixtures.

  - stub_app: in-process FastAPI service exposing both preview
    endpoints with a toy keyword analyzer, scriptable failures and an
    optional gate that holds slow-tier responses
  - make_clients: HTTP analyzer clients wired to the stub through
    httpx.ASGITransport (no real network)
  - FakeAnalyzer: in-memory AnalyzerClient with per-text gates, for
    ordering tests that need exact control over completion order
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

import httpx
import pytest
from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse

from draftcheck.analyzers import AnalyzerClient
from draftcheck.analyzers.http import HttpAnalyzerClient
from draftcheck.models import ContentSnapshot
from draftcheck.schemas.feedback import AnalysisResult, Tier

TOKEN = "test-token"
BASE_URL = "http://analyzer.test"

CLEAN_TEXT = "This is a great argument with solid evidence."
INFLAMMATORY_TEXT = "You're an idiot and everyone like you is wrong."


def _inflammatory(confidence: float) -> dict:
    return {
        "type": "INFLAMMATORY",
        "subtype": "personal_attack",
        "suggestionText": "Focus on the argument rather than the person.",
        "reasoning": "Name-calling detected.",
        "confidenceScore": confidence,
        "educationalResources": None,
        "shouldDisplay": True,
    }


def toy_analysis(content: str, tier: str, sensitivity: Optional[str] = None) -> dict:
    """Keyword analyzer standing in for the real services.

    When `sensitivity` is given it is echoed at the end of the summary so
    tests can tell which request a displayed result answered.
    """
    lowered = content.lower()
    feedback = []
    if "idiot" in lowered:
        feedback.append(_inflammatory(0.9 if tier == "fast" else 0.93))
    if "everyone knows" in lowered:
        feedback.append({
            "type": "UNSOURCED",
            "suggestionText": "Add a source for this claim.",
            "reasoning": "Appeal to common knowledge.",
            "confidenceScore": 0.6,
            "shouldDisplay": True,
        })
    blocking = any(f["type"] == "INFLAMMATORY" for f in feedback)
    prefix = "AI: " if tier == "slow" else ""
    suffix = f" [{sensitivity}]" if sensitivity else ""
    return {
        "feedback": feedback,
        "primary": feedback[0] if feedback else None,
        "readyToPost": not blocking,
        "summary": prefix + ("Consider revising before posting." if feedback else "Looks good!") + suffix,
        "analysisTimeMs": 12 if tier == "fast" else 2300,
    }


def create_stub_app(token: Optional[str] = TOKEN) -> FastAPI:
    app = FastAPI()
    app.state.calls = {"fast": [], "slow": []}
    app.state.failures = {"fast": [], "slow": []}
    app.state.slow_gate = None

    async def handle(tier: str, request: Request, authorization: Optional[str]):
        if token is not None and authorization != f"Bearer {token}":
            return JSONResponse({"message": "Unauthorized"}, status_code=401)
        body = await request.json()
        app.state.calls[tier].append(body)

        if app.state.failures[tier]:
            status, headers = app.state.failures[tier].pop(0)
            return JSONResponse(
                {"message": f"stub failure {status}"},
                status_code=status,
                headers=headers,
            )

        content = body.get("content", "")
        if len(content) < 20:
            return JSONResponse(
                {"message": "Content must be at least 20 characters"},
                status_code=400,
            )
        if tier == "slow" and app.state.slow_gate is not None:
            await app.state.slow_gate.wait()
        return JSONResponse(toy_analysis(content, tier, body.get("sensitivity")))

    @app.post("/feedback/preview")
    async def preview(request: Request, authorization: Optional[str] = Header(None)):
        return await handle("fast", request, authorization)

    @app.post("/feedback/preview/ai")
    async def preview_ai(request: Request, authorization: Optional[str] = Header(None)):
        return await handle("slow", request, authorization)

    return app


@pytest.fixture
def stub_app():
    return create_stub_app()


@pytest.fixture
def make_clients():
    """Factory: (http_client, fast_client, slow_client) bound to an ASGI app."""

    def _make(app: FastAPI, token: str = TOKEN, retry_delay: float = 0.0):
        http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
        fast = HttpAnalyzerClient(
            Tier.FAST, BASE_URL, "/feedback/preview", token,
            http_client=http, retry_delay=retry_delay,
        )
        slow = HttpAnalyzerClient(
            Tier.SLOW, BASE_URL, "/feedback/preview/ai", token,
            http_client=http, retry_delay=retry_delay,
        )
        return http, fast, slow

    return _make


class FakeAnalyzer(AnalyzerClient):
    """AnalyzerClient whose completions are released by hand."""

    def __init__(
        self,
        tier: Tier,
        respond: Optional[Callable[[ContentSnapshot], AnalysisResult]] = None,
        error: Optional[Exception] = None,
    ):
        self.tier = tier
        self.calls: list[ContentSnapshot] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.error = error
        self._respond = respond

    async def analyze(self, snapshot: ContentSnapshot) -> AnalysisResult:
        self.validate(snapshot)
        self.calls.append(snapshot)
        gate = self.gates.get(snapshot.text)
        if gate is not None:
            await gate.wait()
        if self.error is not None:
            raise self.error
        if self._respond is not None:
            return self._respond(snapshot)
        return AnalysisResult(
            summary=f"{self.tier.value}:{snapshot.text}",
            source=self.tier,
        )
