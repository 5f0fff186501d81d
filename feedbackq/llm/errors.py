"""
Error taxonomy for feedback analysis.

Every failure the core can surface is one of the classes below. Each carries a
``kind`` so the HTTP layer (or the CLI) can branch on what went wrong without
inspecting message text:

- configuration problems   -> "fix your credentials"
- backend unavailability   -> "the backend is down"
- malformed model output   -> "the model ignored instructions"
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from feedbackq.llm.gemini import InvocationAttempt


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    INVALID_INPUT = "invalid_input"
    TRANSPORT = "transport"
    BACKEND_UNAVAILABLE = "backend_unavailable"
    EMPTY_RESPONSE = "empty_response"
    SCHEMA_VIOLATION = "schema_violation"


class FeedbackAnalysisError(RuntimeError):
    """Base class for all classification failures."""

    kind: ErrorKind = ErrorKind.TRANSPORT
    http_status: int = 500


class ConfigurationError(FeedbackAnalysisError):
    """Raised when the backend credential is missing or invalid."""

    kind = ErrorKind.CONFIGURATION
    http_status = 500


class InvalidFeedback(FeedbackAnalysisError, ValueError):
    """Raised when the feedback text to classify is missing or blank."""

    kind = ErrorKind.INVALID_INPUT
    http_status = 400


class DiscoveryFailure(FeedbackAnalysisError):
    """Model listing failed. Handled inside the enumerator, never surfaced."""

    kind = ErrorKind.TRANSPORT
    http_status = 503


class TransportError(FeedbackAnalysisError):
    """A single (transport, model) attempt failed."""

    kind = ErrorKind.TRANSPORT
    http_status = 502

    def __init__(
        self,
        message: str,
        *,
        transport: str | None = None,
        model: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.transport = transport
        self.model = model
        self.status_code = status_code


class InvocationExhausted(FeedbackAnalysisError):
    """Every transport x model combination failed."""

    kind = ErrorKind.BACKEND_UNAVAILABLE
    http_status = 503

    def __init__(
        self,
        message: str,
        *,
        last_error: Exception | None,
        attempts: list[InvocationAttempt] | None = None,
    ) -> None:
        super().__init__(message)
        self.last_error = last_error
        self.attempts = list(attempts or [])


class EmptyResponse(FeedbackAnalysisError):
    """The model returned nothing usable."""

    kind = ErrorKind.EMPTY_RESPONSE
    http_status = 502


class SchemaViolation(FeedbackAnalysisError, ValueError):
    """Model output does not satisfy the AnalysisRecord contract."""

    kind = ErrorKind.SCHEMA_VIOLATION
    http_status = 502

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ResponseParseError(SchemaViolation):
    """Model output is not parseable JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(message, field=None)


_PUBLIC_MESSAGES = {
    ErrorKind.CONFIGURATION: "The Gemini API key is not configured. Set GEMINI_API_KEY.",
    ErrorKind.INVALID_INPUT: "Feedback text is required and must be a non-empty string.",
    ErrorKind.TRANSPORT: "The model backend request failed.",
    ErrorKind.BACKEND_UNAVAILABLE: (
        "Unable to reach any Gemini model. Check the API key and network connectivity."
    ),
    ErrorKind.EMPTY_RESPONSE: "The model returned an empty response.",
    ErrorKind.SCHEMA_VIOLATION: "The model returned output that does not match the expected JSON.",
}


def error_payload(exc: FeedbackAnalysisError, *, include_details: bool = False) -> dict[str, Any]:
    """
    Build the response body for a failed classification.

    Args:
        exc: The error raised by the analysis pipeline
        include_details: Include the raw exception message (development only)

    Returns:
        {"error", "kind", "message"} plus "field"/"details" where relevant
    """
    payload: dict[str, Any] = {
        "error": "Failed to analyze feedback",
        "kind": exc.kind.value,
        "message": _PUBLIC_MESSAGES[exc.kind],
    }
    if isinstance(exc, SchemaViolation) and exc.field:
        payload["field"] = exc.field
    if include_details:
        payload["details"] = str(exc)
    return payload
