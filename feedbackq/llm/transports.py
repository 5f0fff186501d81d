"""
Transport strategies for calling Gemini.

Two independent ways of reaching the same backend:
  1. RestTransport: direct HTTPS call to the generateContent endpoint (requests)
  2. SdkTransport: google-generativeai client library

Each ``generate`` call is exactly one attempt against one model. Any failure
is converted to TransportError so the invocation engine can move on to the
next candidate.
"""

from __future__ import annotations

from typing import Any, Protocol

import requests

from feedbackq.config import BackendConfig
from feedbackq.llm.errors import TransportError
from feedbackq.observability.logging import get_logger

logger = get_logger(__name__)


class Transport(Protocol):
    name: str

    def generate(self, model: str, prompt: str) -> str: ...


def _extract_candidate_text(payload: Any) -> str | None:
    """Return candidates[0].content.parts[0].text from a generateContent body."""
    try:
        return payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


class RestTransport:
    """Direct wire-protocol call against the generateContent REST endpoint."""

    name = "rest"

    def __init__(self, config: BackendConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    def generate(self, model: str, prompt: str) -> str:
        """
        POST the prompt to ``models/{model}:generateContent``.

        Side Effects:
            Makes one HTTP request to the Gemini API.
        """
        body = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            response = self.session.post(
                self.config.models_url(model),
                json=body,
                headers={"x-goog-api-key": self.config.require_api_key()},
                timeout=self.config.request_timeout,
            )
        except requests.RequestException as exc:
            raise TransportError(
                f"REST request failed: {exc}", transport=self.name, model=model
            ) from exc

        if response.status_code != 200:
            raise TransportError(
                f"API returned status {response.status_code}: {response.text[:200]}",
                transport=self.name,
                model=model,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(
                f"API response is not valid JSON: {exc}", transport=self.name, model=model
            ) from exc

        text = _extract_candidate_text(payload)
        if not isinstance(text, str):
            raise TransportError(
                "Invalid response format from API", transport=self.name, model=model
            )
        return text


class SdkTransport:
    """Higher-level call through the google-generativeai client library."""

    name = "sdk"

    def __init__(self, config: BackendConfig):
        self.config = config

    def generate(self, model: str, prompt: str) -> str:
        """
        Generate content with ``genai.GenerativeModel(model)``.

        The SDK keeps its credential in process-wide state, so it is configured
        from this transport's config right before every call.

        Side Effects:
            Makes one request to the Gemini API via the SDK.
        """
        try:
            import google.generativeai as genai
        except ImportError as exc:
            raise TransportError(
                "google-generativeai is not installed", transport=self.name, model=model
            ) from exc

        try:
            genai.configure(api_key=self.config.require_api_key())
            generative_model = genai.GenerativeModel(model)
            response = generative_model.generate_content(
                prompt, request_options={"timeout": self.config.request_timeout}
            )
            text = response.text
        except Exception as exc:
            raise TransportError(
                f"SDK call failed: {exc}", transport=self.name, model=model
            ) from exc

        if not isinstance(text, str):
            raise TransportError("SDK returned no text", transport=self.name, model=model)
        return text


def default_transports(
    config: BackendConfig, session: requests.Session | None = None
) -> list[Transport]:
    """Transports in priority order: REST first, SDK second."""
    return [RestTransport(config, session=session), SdkTransport(config)]
