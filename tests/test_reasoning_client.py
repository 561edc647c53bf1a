"""Gemini client error classification tests (no network)."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from google.api_core import exceptions as google_exceptions

sys.path.append(str(Path(__file__).resolve().parents[1]))

from tools.reasoning_client import (
    GeminiReasoningClient,
    ReasoningDeclined,
    ReasoningRateLimited,
    ReasoningUnavailable,
    looks_rate_limited,
)


class FakeModel:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.kwargs: dict = {}

    async def generate_content_async(self, prompt, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


class BlockedResponse:
    prompt_feedback = None

    @property
    def text(self) -> str:
        raise ValueError("The candidate was stopped for SAFETY")


def _client_with(model: FakeModel) -> GeminiReasoningClient:
    client = GeminiReasoningClient(model="gemini-1.5-flash")
    client._build_model = lambda system_instruction: model
    return client


def _complete(client: GeminiReasoningClient) -> str:
    return asyncio.run(client.complete("system", "prompt", temperature=0.7, max_output_tokens=2000))


def test_successful_reply_returns_text() -> None:
    model = FakeModel(response=SimpleNamespace(prompt_feedback=None, text="1|90|a|b"))
    assert _complete(_client_with(model)) == "1|90|a|b"
    assert model.kwargs["generation_config"].temperature == 0.7
    assert model.kwargs["generation_config"].max_output_tokens == 2000


@pytest.mark.parametrize(
    "error",
    [
        google_exceptions.ResourceExhausted("quota"),
        google_exceptions.TooManyRequests("slow down"),
        RuntimeError("HTTP 429 from upstream"),
        RuntimeError("RateLimitError: try later"),
    ],
)
def test_rate_limits_are_recognised(error: Exception) -> None:
    assert looks_rate_limited(error)
    with pytest.raises(ReasoningRateLimited):
        _complete(_client_with(FakeModel(error=error)))


def test_transport_errors_are_unavailable() -> None:
    with pytest.raises(ReasoningUnavailable):
        _complete(_client_with(FakeModel(error=google_exceptions.ServiceUnavailable("down"))))
    assert not looks_rate_limited(ConnectionError("reset by peer"))


def test_blocked_replies_are_declined() -> None:
    with pytest.raises(ReasoningDeclined):
        _complete(_client_with(FakeModel(response=BlockedResponse())))
    blocked_prompt = SimpleNamespace(prompt_feedback=SimpleNamespace(block_reason="SAFETY"), text="")
    with pytest.raises(ReasoningDeclined):
        _complete(_client_with(FakeModel(response=blocked_prompt)))
