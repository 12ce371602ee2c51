"""Failure classification for provider HTTP calls."""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from focusfeed.error_codes import ErrorCode
from focusfeed.exceptions import (
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    RateLimitedError,
)

# Upstream error "type"/"status" markers that mean throttling even when the
# status code is not 429 (e.g. Gemini RESOURCE_EXHAUSTED, OpenAI rate_limit_exceeded).
RATE_LIMIT_MARKERS = ("rate_limit", "resource_exhausted", "quota", "too_many_requests")


def parse_retry_after_header(response: httpx.Response) -> float | None:
    """Parse Retry-After header from response.

    Supports both numeric seconds and HTTP date formats.

    Args:
        response: HTTP response object

    Returns:
        Wait time in seconds, or None if header is missing/invalid
    """
    retry_after = response.headers.get("Retry-After")
    if not retry_after:
        return None

    try:
        wait_seconds = float(retry_after)
        if wait_seconds > 0:
            return wait_seconds
        return None
    except ValueError:
        pass

    try:
        retry_datetime = parsedate_to_datetime(retry_after)
    except (TypeError, ValueError):
        return None
    if retry_datetime.tzinfo is None:
        retry_datetime = retry_datetime.replace(tzinfo=timezone.utc)
    delta = (retry_datetime - datetime.now(timezone.utc)).total_seconds()
    return float(delta) if delta > 0 else None


def extract_error_type(response: httpx.Response) -> tuple[str, str]:
    """Pull the upstream error type and message out of an error body.

    Handles the OpenAI shape {"error": {"type", "message", "code"}} and the
    Google shape {"error": {"status", "message", "code"}}.

    Returns:
        (error_type, error_message); empty strings when absent
    """
    try:
        body = response.json()
    except ValueError:
        return "", response.text[:500]

    if not isinstance(body, dict):
        return "", str(body)[:500]

    error = body.get("error")
    if isinstance(error, dict):
        error_type = error.get("type") or error.get("status") or error.get("code") or ""
        return str(error_type), str(error.get("message", ""))
    if isinstance(error, str):
        return "", error
    return "", ""


def is_rate_limited(status_code: int, error_type: str) -> bool:
    """Check if a failed response signals throttling."""
    if status_code == 429:
        return True
    lowered = error_type.lower()
    return any(marker in lowered for marker in RATE_LIMIT_MARKERS)


def classify_http_error(
    error: httpx.HTTPStatusError, provider: str, model: str
) -> ProviderError:
    """Map an HTTP error status to the provider error taxonomy.

    Args:
        error: HTTP status error raised by raise_for_status()
        provider: Provider name for context
        model: Model identifier for context

    Returns:
        RateLimitedError for throttling, ProviderUnavailableError otherwise
    """
    response = error.response
    status_code = response.status_code
    error_type, error_message = extract_error_type(response)
    context: dict[str, Any] = {
        "provider": provider,
        "model": model,
        "status_code": status_code,
        "error_type": error_type,
    }

    if is_rate_limited(status_code, error_type):
        retry_after = parse_retry_after_header(response)
        return RateLimitedError(
            f"{provider} rate limit exceeded: {error_message or status_code}",
            error_code=ErrorCode.PRV_RATE_LIMITED.value,
            context=context,
            retry_after=retry_after,
        )

    return ProviderUnavailableError(
        f"{provider} returned HTTP {status_code}: {error_message or 'no details'}",
        error_code=ErrorCode.PRV_UNAVAILABLE.value,
        context=context,
    )


def classify_exception(
    error: httpx.HTTPError, provider: str, model: str, timeout: float
) -> ProviderError:
    """Map any httpx failure to the provider error taxonomy."""
    if isinstance(error, httpx.HTTPStatusError):
        return classify_http_error(error, provider, model)

    if isinstance(error, httpx.TimeoutException):
        return ProviderTimeoutError(
            f"{provider} request timed out after {timeout:g}s",
            error_code=ErrorCode.PRV_TIMEOUT.value,
            context={"provider": provider, "model": model, "timeout": timeout},
        )

    return ProviderUnavailableError(
        f"{provider} request failed: {error}",
        error_code=ErrorCode.PRV_UNAVAILABLE.value,
        context={
            "provider": provider,
            "model": model,
            "error_type": type(error).__name__,
        },
    )
