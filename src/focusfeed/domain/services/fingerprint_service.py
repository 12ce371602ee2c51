"""Domain service for text normalization and fingerprints."""

import hashlib
import re

_WHITESPACE_RE = re.compile(r"\s+")


class FingerprintService:
    """Normalization rules shared by the cache, dedup tracker and fallback library.

    A snippet has no identity beyond its normalized text, so the
    normalized text itself is its fingerprint.
    """

    @staticmethod
    def normalize(text: str) -> str:
        """Trim, collapse internal whitespace and case-fold."""
        return _WHITESPACE_RE.sub(" ", text.strip()).casefold()

    @staticmethod
    def display_topic(topic: str) -> str:
        """Topic as shown to the user: trimmed, internal whitespace collapsed."""
        return _WHITESPACE_RE.sub(" ", topic.strip())

    @staticmethod
    def fingerprint(snippet: str) -> str:
        """Fingerprint used for per-viewer dedup."""
        return FingerprintService.normalize(snippet)

    @staticmethod
    def short_id(*parts: str, length: int = 6) -> str:
        """Short deterministic hex id derived from the given parts."""
        payload = "|".join(parts)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:length]

    @staticmethod
    def hash_viewer_key(viewer_key: str) -> str:
        """Viewer key as it may appear in logs (never logged raw)."""
        return hashlib.sha256(viewer_key.encode("utf-8")).hexdigest()[:12]

    @staticmethod
    def cache_key(
        normalized_topic: str,
        count: int,
        cursor: str | None,
        generate_options: bool,
    ) -> str:
        """Cache key for a generation; viewer key is intentionally absent."""
        key_string = "|".join(
            [normalized_topic, str(count), cursor or "", "1" if generate_options else "0"]
        )
        return hashlib.sha256(key_string.encode("utf-8")).hexdigest()[:32]
