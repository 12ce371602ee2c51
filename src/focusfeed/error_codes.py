"""Structured error codes for machine-readable error handling.

Error codes follow the format: {DOMAIN}-{CATEGORY}-{NUMBER}

Error Domains:
    REQ - Request validation errors
    PRV - Upstream provider errors
    PAR - Response parsing errors
    DUP - Deduplication conditions
    CFG - Configuration errors

Usage:
    from focusfeed.error_codes import ErrorCode

    logger.warning(
        "generation_fallback_used",
        error_code=ErrorCode.PRV_TIMEOUT.value,
        topic=topic,
    )
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Structured error codes for machine-readable handling.

    All error codes inherit from str for JSON serialization compatibility.
    """

    # =========================================================================
    # Request Errors (REQ-xxx-xxx)
    # =========================================================================
    REQ_TOPIC_INVALID = "REQ-TOPIC-001"
    """Topic is empty or longer than the allowed maximum."""

    REQ_COUNT_INVALID = "REQ-COUNT-001"
    """Requested snippet count is outside the allowed range."""

    REQ_VIEWER_MISSING = "REQ-VIEWER-001"
    """No viewer key was supplied for deduplication scope."""

    REQ_CURSOR_INVALID = "REQ-CURSOR-001"
    """Continuation cursor could not be decoded."""

    # =========================================================================
    # Provider Errors (PRV-xxx-xxx)
    # =========================================================================
    PRV_TIMEOUT = "PRV-TIMEOUT-001"
    """Provider call exceeded its timeout."""

    PRV_WAIT_TIMEOUT = "PRV-TIMEOUT-002"
    """Timed out waiting for an in-flight generation of the same key."""

    PRV_UNAVAILABLE = "PRV-UNAVAIL-001"
    """Provider unreachable or returned a non-throttling error status."""

    PRV_RATE_LIMITED = "PRV-RATE-001"
    """Provider signalled throttling."""

    PRV_EMPTY_COMPLETION = "PRV-EMPTY-001"
    """Provider returned a successful response without text."""

    PRV_FALLBACK_USED = "PRV-FALLBACK-001"
    """Fallback content replaced provider output."""

    # =========================================================================
    # Parsing Errors (PAR-xxx-xxx)
    # =========================================================================
    PAR_NO_JSON_OBJECT = "PAR-JSON-001"
    """No balanced JSON object found in provider text."""

    PAR_INVALID_JSON = "PAR-JSON-002"
    """Extracted JSON span could not be decoded."""

    PAR_UNEXPECTED_SHAPE = "PAR-SHAPE-001"
    """Decoded object has no recognised card collection."""

    # =========================================================================
    # Deduplication Conditions (DUP-xxx-xxx)
    # =========================================================================
    DUP_ALL_DUPLICATES = "DUP-ALL-001"
    """Every candidate snippet had already been served to the viewer."""

    DUP_TOPUP_EXHAUSTED = "DUP-TOPUP-001"
    """Top-up attempts ran out before reaching the requested count."""

    # =========================================================================
    # Configuration Errors (CFG-xxx-xxx)
    # =========================================================================
    CFG_INVALID = "CFG-INVALID-001"
    """Configuration validation failed."""

    CFG_MISSING_KEY = "CFG-KEY-001"
    """Required configuration key is missing."""


def get_error_domain(code: ErrorCode) -> str:
    """Extract the domain from an error code.

    Args:
        code: The error code

    Returns:
        The domain prefix (e.g., "REQ", "PRV")
    """
    return code.value.split("-")[0]


def get_error_severity(code: ErrorCode) -> str:
    """Get the severity level for an error code.

    Args:
        code: The error code

    Returns:
        Severity level: "critical", "error", "warning"
    """
    critical_codes = {
        ErrorCode.CFG_INVALID,
        ErrorCode.CFG_MISSING_KEY,
    }
    warning_codes = {
        ErrorCode.PRV_FALLBACK_USED,
        ErrorCode.DUP_ALL_DUPLICATES,
        ErrorCode.DUP_TOPUP_EXHAUSTED,
    }

    if code in critical_codes:
        return "critical"
    if code in warning_codes:
        return "warning"
    return "error"
