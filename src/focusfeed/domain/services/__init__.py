"""Domain services package."""

from .cursor_service import ContinuationCursor, CursorService
from .fingerprint_service import FingerprintService

__all__ = [
    "ContinuationCursor",
    "CursorService",
    "FingerprintService",
]
