"""Interface for per-viewer fingerprint storage."""

from abc import ABC, abstractmethod
from collections.abc import Iterable


class IDedupStore(ABC):
    """Stores which snippet fingerprints each viewer has already seen."""

    @abstractmethod
    def snapshot(self, viewer_key: str) -> frozenset[str]:
        """Return the viewer's current fingerprints (empty if unknown)."""

    @abstractmethod
    def add(self, viewer_key: str, fingerprints: Iterable[str]) -> None:
        """Atomically append fingerprints to the viewer's set."""

    @abstractmethod
    def size(self, viewer_key: str) -> int:
        """Number of fingerprints held for the viewer."""

    @abstractmethod
    def clear(self, viewer_key: str | None = None) -> None:
        """Forget one viewer, or every viewer when viewer_key is None."""
