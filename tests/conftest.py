"""
Pytest configuration for feedbackq tests

Provides fake transports, a test backend config and analyzer factories so no
test touches the network.
"""

from __future__ import annotations

import json

import pytest

from feedbackq.analysis.service import FeedbackAnalyzer
from feedbackq.config import BackendConfig
from feedbackq.llm.errors import TransportError
from feedbackq.llm.gemini import InvocationEngine
from feedbackq.observability.telemetry import reset_counters
from feedbackq.storage.trend_store import InMemoryTrendStore


class FakeTransport:
    """Scripted transport: maps model id -> response text or exception.

    Models with no scripted outcome fail with TransportError.
    """

    def __init__(self, name: str, responses: dict | None = None):
        self.name = name
        self.responses = dict(responses or {})
        self.calls: list[str] = []
        self.prompts: list[str] = []

    def generate(self, model: str, prompt: str) -> str:
        self.calls.append(model)
        self.prompts.append(prompt)
        outcome = self.responses.get(model)
        if outcome is None:
            raise TransportError(
                f"{self.name}/{model} unavailable", transport=self.name, model=model
            )
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(prompt)
        return outcome


def analysis_json(
    sentiment: str = "Negative",
    category: str = "Support",
    summary: str = "Customer waited days for a reply",
    suggestions: list | None = None,
) -> str:
    """Model-style JSON for an analysis record."""
    return json.dumps(
        {
            "sentiment": sentiment,
            "category": category,
            "summary": summary,
            "suggestions": suggestions if suggestions is not None else ["Add live chat"],
        }
    )


@pytest.fixture(autouse=True)
def clean_telemetry():
    reset_counters()
    yield
    reset_counters()


@pytest.fixture
def backend_config():
    return BackendConfig(
        api_key="test-key",
        base_url="https://generativelanguage.test",
        api_version="v1",
        request_timeout=5.0,
        discovery_timeout=2.0,
        fallback_models=("gemini-pro", "gemini-1.5-flash"),
    )


@pytest.fixture
def fake_transport():
    """Factory for FakeTransport instances."""
    return FakeTransport


@pytest.fixture
def make_engine(backend_config):
    """Build an InvocationEngine over fake transports and a fixed model list."""

    def _make(transports, models=("model-a", "model-b", "model-c"), config=None):
        return InvocationEngine(
            config or backend_config,
            transports=transports,
            model_lister=lambda _config: list(models),
        )

    return _make


@pytest.fixture
def make_analyzer(make_engine):
    """Analyzer whose REST transport answers every model with ``response``."""

    def _make(response=None, store=None, feedback_log=None):
        responder = response if response is not None else analysis_json()
        rest = FakeTransport("rest", {"model-a": responder})
        engine = make_engine([rest, FakeTransport("sdk")], models=("model-a",))
        if store is None:
            store = InMemoryTrendStore()
        return FeedbackAnalyzer(engine, store=store, feedback_log=feedback_log)

    return _make
