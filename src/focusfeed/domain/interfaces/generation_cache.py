"""Interface for the generation result cache."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


class IGenerationCache(ABC):
    """TTL cache with single-flight population."""

    @abstractmethod
    def get_or_generate(
        self, key: str, generate: Callable[[], T], ttl: float | None = None
    ) -> T:
        """Return the cached value for key, generating it at most once.

        Concurrent callers for a key whose generation is in flight wait for
        that generation instead of starting their own. Failures are not
        cached and are re-raised to every waiter.

        Args:
            key: Cache key
            generate: Zero-argument callable producing the value
            ttl: Time to live in seconds (cache default if None)

        Returns:
            Cached or freshly generated value
        """

    @abstractmethod
    def invalidate(self, key: str) -> bool:
        """Drop an entry. Returns True if one was present."""

    @abstractmethod
    def sweep_expired(self) -> int:
        """Remove expired entries. Returns the number removed."""

    @abstractmethod
    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
