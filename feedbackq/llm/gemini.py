"""
Gemini invocation engine.

Obtains one raw text response for a prompt by walking a fallback matrix of
transport strategy x candidate model:

    for transport in (rest, sdk):          # priority order
        for model in candidate models:     # enumerator order
            one attempt -> success ends the whole search

There is no retry of a (transport, model) pair and no concurrency: attempts
run strictly one after another so cost stays bounded and every failure is
attributable to exactly one pair. When every pair fails, InvocationExhausted
carries the most recent error and the full attempt log.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from functools import partial

import requests

from feedbackq.config import BackendConfig
from feedbackq.llm.discovery import list_candidate_models
from feedbackq.llm.errors import InvocationExhausted, TransportError
from feedbackq.llm.transports import Transport, default_transports
from feedbackq.observability.logging import get_logger
from feedbackq.observability.telemetry import counter, log_event, time_block

logger = get_logger(__name__)

ModelLister = Callable[[BackendConfig], list[str]]


@dataclass(frozen=True)
class InvocationAttempt:
    """One (transport, model) call and its outcome."""

    transport: str
    model: str
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class InvocationResult:
    text: str
    transport: str
    model: str
    attempts: list[InvocationAttempt] = field(default_factory=list)


def _redact_prompt(prompt: str) -> str:
    """First 50 chars + hash, safe for logs."""
    preview = prompt[:50]
    digest = hashlib.sha256(prompt.encode("utf-8")).hexdigest()[:12]
    return f"{preview}... (hash:{digest})"


class InvocationEngine:
    """Sequential fallback search over transports and candidate models."""

    def __init__(
        self,
        config: BackendConfig,
        transports: Sequence[Transport] | None = None,
        model_lister: ModelLister | None = None,
        session: requests.Session | None = None,
    ):
        self.config = config
        self.transports = (
            list(transports) if transports is not None else default_transports(config, session)
        )
        self.model_lister = model_lister or partial(list_candidate_models, session=session)

    def _attempt_plan(self, models: Sequence[str]) -> Iterator[tuple[Transport, str]]:
        for transport in self.transports:
            for model in models:
                yield transport, model

    def invoke(self, prompt: str) -> str:
        """Return the first successful raw text response for ``prompt``."""
        return self.invoke_detailed(prompt).text

    def invoke_detailed(self, prompt: str) -> InvocationResult:
        """
        Run the fallback search and report which pair answered.

        Raises:
            ConfigurationError: API key missing (before any network call)
            InvocationExhausted: Every transport x model attempt failed

        Side Effects:
            - One discovery call, then up to len(transports) * len(models) model calls
            - Increments llm.* counters and writes telemetry events
        """
        self.config.require_api_key()

        models = self.model_lister(self.config)
        attempts: list[InvocationAttempt] = []
        last_error: TransportError | None = None

        log_event(
            "llm.invoke.start",
            prompt_preview=_redact_prompt(prompt),
            models=list(models),
            transports=[t.name for t in self.transports],
        )

        for transport, model in self._attempt_plan(models):
            logger.info("Trying %s transport with model: %s", transport.name, model)
            try:
                with time_block("llm.attempt.latency"):
                    text = transport.generate(model, prompt)
            except TransportError as exc:
                last_error = exc
                attempts.append(InvocationAttempt(transport.name, model, error=str(exc)))
                counter("llm.attempt.error")
                logger.warning("%s transport with %s failed: %s", transport.name, model, exc)
                continue

            attempts.append(InvocationAttempt(transport.name, model))
            counter("llm.invoke.success")
            counter(f"llm.invoke.success.{transport.name}")
            logger.info(
                "Successfully used model %s via %s (%d characters)",
                model,
                transport.name,
                len(text),
            )
            log_event(
                "llm.invoke.success",
                transport=transport.name,
                model=model,
                attempts=len(attempts),
            )
            return InvocationResult(
                text=text, transport=transport.name, model=model, attempts=attempts
            )

        counter("llm.invoke.exhausted")
        details = str(last_error) if last_error else "no candidate models"
        logger.error("All transports and models failed. Last error: %s", details)
        log_event("llm.invoke.exhausted", attempts=len(attempts), last_error=details[:150])
        raise InvocationExhausted(
            f"Unable to get a response from Gemini after {len(attempts)} attempts: {details[:150]}",
            last_error=last_error,
            attempts=attempts,
        ) from last_error
