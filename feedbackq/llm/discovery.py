"""
Candidate model discovery.

Lists the models the backend currently offers for text generation. Discovery
is best-effort: any failure falls back to the configured static list so the
invocation engine always has candidates to try.
"""

from __future__ import annotations

from typing import Any

import requests

from feedbackq.config import GENERATION_METHOD, BackendConfig
from feedbackq.llm.errors import DiscoveryFailure
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter, log_event

logger = get_logger(__name__)


def _parse_model_listing(payload: Any) -> list[str]:
    """Extract generation-capable model ids from a models.list response."""
    if not isinstance(payload, dict) or not isinstance(payload.get("models"), list):
        raise DiscoveryFailure("No models found in API response")

    names: list[str] = []
    for model in payload["models"]:
        if not isinstance(model, dict):
            continue
        methods = model.get("supportedGenerationMethods") or []
        name = model.get("name")
        if GENERATION_METHOD in methods and isinstance(name, str) and name:
            names.append(name.removeprefix("models/"))

    if not names:
        raise DiscoveryFailure("Model listing contained no generation-capable models")
    return names


def discover_models(config: BackendConfig, session: requests.Session | None = None) -> list[str]:
    """
    Call the backend's model listing endpoint once.

    Raises:
        DiscoveryFailure: On network error, non-200 status, malformed or empty listing

    Side Effects:
        - Makes one HTTP GET request to the models endpoint
    """
    if not config.has_api_key:
        raise DiscoveryFailure("GEMINI_API_KEY is not set")

    http = session or requests.Session()
    try:
        response = http.get(
            config.models_url(),
            headers={"x-goog-api-key": config.require_api_key()},
            timeout=config.discovery_timeout,
        )
    except requests.RequestException as exc:
        raise DiscoveryFailure(f"Model listing request failed: {exc}") from exc

    if response.status_code != 200:
        raise DiscoveryFailure(f"API returned status {response.status_code}")

    try:
        payload = response.json()
    except ValueError as exc:
        raise DiscoveryFailure(f"Model listing is not valid JSON: {exc}") from exc

    return _parse_model_listing(payload)


def list_candidate_models(
    config: BackendConfig, session: requests.Session | None = None
) -> list[str]:
    """
    Return the ordered list of model ids to try.

    Never raises: when discovery fails the static fallback list from the
    config is returned instead.

    Side Effects:
        - One discovery HTTP call (no retry)
        - Increments llm.discovery.* counters
    """
    try:
        models = discover_models(config, session=session)
    except DiscoveryFailure as exc:
        counter("llm.discovery.fallback")
        logger.warning("Could not fetch model list, using fallback models: %s", exc)
        log_event("llm.discovery.fallback", error=str(exc), fallback=list(config.fallback_models))
        return list(config.fallback_models)

    counter("llm.discovery.success")
    logger.info("Available models: %s", ", ".join(models))
    return models
