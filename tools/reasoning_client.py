"""Reasoning-service clients used by the recommendation agents.

Agents talk to a :class:`ReasoningClient` and only ever see the small error
hierarchy defined here, so the Gemini SDK's own exception types stay inside
this module.
"""
from __future__ import annotations

import logging
from typing import Optional

from google import generativeai as genai
from google.api_core import exceptions as google_exceptions
from google.generativeai import types as genai_types

from wardrobe_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

_RATE_LIMIT_MARKERS = ("429", "quota", "rate limit", "ratelimiterror", "resource exhausted")


class ReasoningServiceError(RuntimeError):
    """Base error for any failed reasoning-service call."""


class ReasoningRateLimited(ReasoningServiceError):
    """The service rejected the call because of a rate or quota limit."""


class ReasoningDeclined(ReasoningServiceError):
    """The service answered but refused or blocked the content."""


class ReasoningUnavailable(ReasoningServiceError):
    """Transport failure, timeout or any other unusable reply."""


def looks_rate_limited(exc: BaseException) -> bool:
    """Recognise rate limiting from status codes or error text."""

    if isinstance(exc, (google_exceptions.ResourceExhausted, google_exceptions.TooManyRequests)):
        return True
    if getattr(exc, "code", None) == 429 or getattr(exc, "status_code", None) == 429:
        return True
    message = f"{type(exc).__name__} {exc}".lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


class ReasoningClient:
    """Text-in, text-out access to a language model."""

    async def complete(
        self,
        system_instruction: str,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        raise NotImplementedError


class GeminiReasoningClient(ReasoningClient):
    """Calls Gemini through ``google.generativeai``.

    ``genai.configure`` must have been called with an API key before the
    first request; :class:`wardrobe_app.app.SmartWardrobeApp` does this.
    """

    def __init__(self, model: str, request_timeout: Optional[float] = 30.0) -> None:
        self.model = model
        self.request_timeout = request_timeout

    def _build_model(self, system_instruction: str) -> genai.GenerativeModel:
        return genai.GenerativeModel(model_name=self.model, system_instruction=system_instruction)

    async def complete(
        self,
        system_instruction: str,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        model = self._build_model(system_instruction)
        generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )
        request_options = {"timeout": self.request_timeout} if self.request_timeout else None
        try:
            response = await model.generate_content_async(
                prompt,
                generation_config=generation_config,
                request_options=request_options,
            )
        except (genai_types.BlockedPromptException, genai_types.StopCandidateException) as exc:
            raise ReasoningDeclined(str(exc)) from exc
        except Exception as exc:
            if looks_rate_limited(exc):
                log_event(LOGGER, logging.WARNING, "reasoning_rate_limited", model=self.model, error=str(exc))
                raise ReasoningRateLimited(str(exc)) from exc
            log_event(LOGGER, logging.WARNING, "reasoning_unavailable", model=self.model, error=str(exc))
            raise ReasoningUnavailable(str(exc)) from exc

        return self._extract_text(response)

    @staticmethod
    def _extract_text(response: object) -> str:
        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            raise ReasoningDeclined(f"Prompt blocked: {feedback.block_reason}")
        try:
            text = response.text
        except ValueError as exc:
            # .text raises when the candidate was stopped for safety or has no parts.
            raise ReasoningDeclined(str(exc)) from exc
        if text is None:
            raise ReasoningUnavailable("Reasoning service returned no text")
        return text


__all__ = [
    "GeminiReasoningClient",
    "ReasoningClient",
    "ReasoningDeclined",
    "ReasoningRateLimited",
    "ReasoningServiceError",
    "ReasoningUnavailable",
    "looks_rate_limited",
]
