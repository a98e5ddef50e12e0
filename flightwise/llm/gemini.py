from __future__ import annotations

import json
from typing import Any, Dict, Optional

import requests

from flightwise.config import Settings
from flightwise.utils.log import get_logger
from flightwise.utils.retry import bounded_retry

logger = get_logger(__name__)


class LLMError(Exception):
    pass


class LLMTransientError(LLMError):
    """Rate limit, 5xx, timeout or connection failure. Safe to retry."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LLMResponseError(LLMError):
    """The provider answered, but not with a usable completion."""


def is_transient(exc: BaseException) -> bool:
    return isinstance(exc, LLMTransientError)


class GeminiClient:
    """
    Thin client for the Gemini generateContent REST endpoint.

    thinking_budget=0 disables reasoning so every output token goes to the
    answer; only pass a budget where reasoning actually improves the reply.
    """

    def __init__(
        self,
        api_key: str,
        model: str = Settings.gemini_model,
        base_url: str = Settings.gemini_base_url,
        timeout: float = Settings.llm_timeout_seconds,
        max_attempts: int = Settings.llm_max_attempts,
        backoff_seconds: float = Settings.llm_backoff_seconds,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.http = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiClient":
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
            timeout=settings.llm_timeout_seconds,
            max_attempts=settings.llm_max_attempts,
            backoff_seconds=settings.llm_backoff_seconds,
        )

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def complete(
        self,
        prompt: str,
        max_output_tokens: int = 800,
        temperature: float = 0.7,
        thinking_budget: int = 0,
    ) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "maxOutputTokens": max_output_tokens,
                "temperature": temperature,
                "thinkingConfig": {"thinkingBudget": thinking_budget},
            },
        }
        retrying = bounded_retry(self.max_attempts, self.backoff_seconds, is_transient)
        return retrying(self._complete_once, body)

    def _complete_once(self, body: Dict[str, Any]) -> str:
        try:
            r = self.http.post(
                self.url,
                json=body,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning("gemini request failed: %r", e)
            raise LLMTransientError(f"Gemini request failed: {e}") from e

        if r.status_code == 429 or r.status_code >= 500:
            logger.warning("gemini HTTP %s: %s", r.status_code, r.text[:200])
            raise LLMTransientError(f"Gemini HTTP {r.status_code}", status_code=r.status_code)
        if r.status_code >= 400:
            raise LLMError(f"Gemini HTTP {r.status_code}: {r.text[:200]}")

        return extract_text(r.text)


def extract_text(raw: str) -> str:
    """Pull the completion text out of a generateContent response body."""
    if not raw or not raw.strip():
        raise LLMResponseError("Empty response from Gemini")

    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise LLMResponseError(f"Gemini response is not JSON: {e}") from e

    candidates = payload.get("candidates") if isinstance(payload, dict) else None
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        logger.warning("gemini unexpected payload: %s", raw[:500])
        raise LLMResponseError("Gemini response has no candidates")

    content = candidates[0].get("content") or {}
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        logger.warning("gemini unexpected payload: %s", raw[:500])
        raise LLMResponseError("Gemini candidate has no parts")

    chunks = []
    for p in parts:
        if not isinstance(p, dict) or p.get("thought"):
            continue
        piece = p.get("text")
        if piece is None:
            continue
        if not isinstance(piece, str):
            raise LLMResponseError(f"Gemini part text is {type(piece).__name__}, not str")
        chunks.append(piece)

    text = "".join(chunks)
    if not text.strip():
        raise LLMResponseError("Gemini returned an empty completion")
    return text
