"""Domain entity for generation cache entries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """Immutable cached generation result.

    Entries are never updated in place; replacement only happens after
    expiry followed by regeneration.
    """

    key: str
    value: Any
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check whether the entry has outlived its TTL."""
        return now >= self.expires_at

    @property
    def ttl_seconds(self) -> float:
        return self.expires_at - self.created_at
