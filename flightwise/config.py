from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    llm_timeout_seconds: float = 30.0
    llm_max_attempts: int = 3
    llm_backoff_seconds: float = 2.0

    serpapi_api_key: str = ""
    serpapi_base_url: str = "https://serpapi.com/search.json"
    serpapi_language: str = "es"
    flights_provider: str = "serpapi"  # serpapi | mock
    flights_timeout_seconds: float = 30.0
    flights_max_attempts: int = 1
    flights_backoff_seconds: float = 1.0

    conversation_store: str = "memory"  # memory | sql
    database_url: Optional[str] = None
    history_max_turns: int = 10

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", cls.gemini_model),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", cls.gemini_base_url),
            llm_timeout_seconds=_env_float("LLM_TIMEOUT_SECONDS", cls.llm_timeout_seconds),
            llm_max_attempts=_env_int("LLM_MAX_ATTEMPTS", cls.llm_max_attempts),
            llm_backoff_seconds=_env_float("LLM_BACKOFF_SECONDS", cls.llm_backoff_seconds),
            serpapi_api_key=os.getenv("SERPAPI_API_KEY", ""),
            serpapi_base_url=os.getenv("SERPAPI_BASE_URL", cls.serpapi_base_url),
            serpapi_language=os.getenv("SERPAPI_LANGUAGE", cls.serpapi_language),
            flights_provider=os.getenv("FLIGHTS_PROVIDER", cls.flights_provider).strip().lower(),
            flights_timeout_seconds=_env_float("FLIGHTS_TIMEOUT_SECONDS", cls.flights_timeout_seconds),
            flights_max_attempts=_env_int("FLIGHTS_MAX_ATTEMPTS", cls.flights_max_attempts),
            flights_backoff_seconds=_env_float("FLIGHTS_BACKOFF_SECONDS", cls.flights_backoff_seconds),
            conversation_store=os.getenv("CONVERSATION_STORE", cls.conversation_store).strip().lower(),
            database_url=os.getenv("DATABASE_URL") or None,
            history_max_turns=_env_int("HISTORY_MAX_TURNS", cls.history_max_turns),
            log_level=os.getenv("LOG_LEVEL", cls.log_level),
        )
