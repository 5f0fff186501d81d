"""Centralized configuration for feedbackq.

Re-exports everything from feedbackq.infrastructure.settings, then adds typed
constants for the LLM backend, trend tracking and batch processing, plus the
``BackendConfig`` object that is built once and handed to the model layer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from feedbackq.infrastructure.settings import *  # noqa: F401, F403
from feedbackq.infrastructure.settings import (
    FALLBACK_MODELS,
    GEMINI_API_KEY,
    GEMINI_API_VERSION,
    GEMINI_BASE_URL,
)
from feedbackq.llm.errors import ConfigurationError

# --- App ---
APP_VERSION: str = "1.0.0"

# --- LLM ---
LLM_TIMEOUT_SECONDS: float = float(os.getenv("FEEDBACKQ_LLM_TIMEOUT", "30"))
DISCOVERY_TIMEOUT_SECONDS: float = float(os.getenv("FEEDBACKQ_DISCOVERY_TIMEOUT", "10"))
GENERATION_METHOD: str = "generateContent"

# --- Trends ---
TREND_HISTORY_CAPACITY: int = 50
HIGH_PRIORITY_STREAK: int = 5
MEDIUM_PRIORITY_STREAK: int = 3

# --- Batch ---
BATCH_PAUSE_SECONDS: float = float(os.getenv("FEEDBACKQ_BATCH_PAUSE_SECONDS", "0.1"))


def _split_models(raw: str) -> tuple[str, ...]:
    return tuple(name.strip() for name in raw.split(",") if name.strip())


@dataclass(frozen=True)
class BackendConfig:
    """Credentials and endpoints for the text-generation backend.

    Constructed once and passed by reference into discovery, transports and
    the invocation engine.
    """

    api_key: str | None
    base_url: str = GEMINI_BASE_URL
    api_version: str = GEMINI_API_VERSION
    request_timeout: float = LLM_TIMEOUT_SECONDS
    discovery_timeout: float = DISCOVERY_TIMEOUT_SECONDS
    fallback_models: tuple[str, ...] = field(default_factory=lambda: _split_models(FALLBACK_MODELS))

    @classmethod
    def from_env(cls) -> BackendConfig:
        return cls(api_key=GEMINI_API_KEY)

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def require_api_key(self) -> str:
        """Return the API key or raise ConfigurationError if it is missing."""
        if not self.has_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY is not configured. Set it in the environment or a .env file."
            )
        return self.api_key.strip()  # type: ignore[union-attr]

    def models_url(self, model: str | None = None) -> str:
        root = f"{self.base_url.rstrip('/')}/{self.api_version}/models"
        if model is None:
            return root
        return f"{root}/{model}:{GENERATION_METHOD}"
