"""Centralized exception hierarchy for focusfeed.

Exception Hierarchy:
    FocusFeedError (base)
     ConfigurationError - Configuration loading/validation errors
     BadRequestError - Invalid generation request (surfaced to callers)
     ProviderError - Upstream text-generation failures
        ProviderTimeoutError - Provider call exceeded its timeout
        ProviderUnavailableError - Transport failure or non-throttling 4xx/5xx
        RateLimitedError - Upstream signalled throttling
        InvalidResponseError - 200 response with empty/missing payload
     MalformedResponseError - Provider text did not contain usable JSON

Only BadRequestError is meant to reach callers of the generation pipeline.
Everything else is recovered locally with fallback content.

Usage Examples:
    try:
        result = orchestrator.generate(request)
    except BadRequestError as e:
        return {"success": False, "error": e.message}

    raise RateLimitedError(
        "Gemini rate limit exceeded",
        error_code=ErrorCode.PRV_RATE_LIMITED.value,
        context={"status_code": 429},
        retry_after=12.0,
    )
"""

from typing import Any


class FocusFeedError(Exception):
    """Base exception for all focusfeed errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        error_code: Structured error code for machine-readable handling
        context: Additional context for debugging (e.g., topic, provider)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            suggestion: Optional suggestion for resolving the error
            error_code: Structured error code (e.g., "PRV-TIMEOUT-001")
            context: Additional context for debugging
        """
        self.message = message
        self.suggestion = suggestion
        self.error_code = error_code
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with error code and suggestion if available."""
        parts = []
        if self.error_code:
            parts.append(f"[{self.error_code}] {self.message}")
        else:
            parts.append(self.message)
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging.

        Returns:
            Dictionary with error details
        """
        return {
            "message": self.message,
            "error_code": self.error_code,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


# Configuration Errors


class ConfigurationError(FocusFeedError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is missing or malformed
    - The selected provider has no API key
    - Configuration values fail validation
    """


# Request Errors


class BadRequestError(FocusFeedError):
    """Invalid generation request.

    Raised before any upstream call when the topic, count, viewer key
    or continuation cursor is unusable.
    """


# Provider Errors


class ProviderError(FocusFeedError):
    """Upstream text-generation provider errors.

    Base class for all failures of a provider call. The orchestrator
    recovers from every subclass with fallback content.
    """

    failure_kind = "provider_error"


class ProviderTimeoutError(ProviderError):
    """Provider request exceeded its timeout."""

    failure_kind = "provider_timeout"


class ProviderUnavailableError(ProviderError):
    """Provider unreachable or returned a non-throttling error status."""

    failure_kind = "provider_unavailable"


class RateLimitedError(ProviderError):
    """Provider signalled throttling (HTTP 429 or quota exhaustion)."""

    failure_kind = "rate_limited"

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        retry_after: float | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            suggestion: Optional suggestion for resolving the error
            error_code: Structured error code
            context: Additional context for debugging
            retry_after: Seconds the provider asked us to wait, if given
        """
        self.retry_after = retry_after
        super().__init__(
            message, suggestion=suggestion, error_code=error_code, context=context
        )


class InvalidResponseError(ProviderError):
    """Provider answered successfully but the payload was empty or missing."""

    failure_kind = "invalid_response"


# Parsing Errors


class MalformedResponseError(FocusFeedError):
    """Provider text could not be decoded into cards.

    Raised by the response parser when no balanced JSON object can be
    located, when the located span is not valid JSON, or when the decoded
    object has no recognised card collection.
    """

    failure_kind = "malformed_response"


__all__ = [
    "BadRequestError",
    "ConfigurationError",
    "FocusFeedError",
    "InvalidResponseError",
    "MalformedResponseError",
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
    "RateLimitedError",
]
