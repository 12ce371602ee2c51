"""Per-viewer duplicate suppression for generated snippets."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from focusfeed.domain.interfaces.dedup_store import IDedupStore
from focusfeed.domain.services import FingerprintService
from focusfeed.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FilterResult:
    """Outcome of filtering one candidate list."""

    unique: list[str] = field(default_factory=list)
    duplicate_count: int = 0

    @property
    def all_duplicates(self) -> bool:
        """True when there were candidates and every one was rejected."""
        return not self.unique and self.duplicate_count > 0


class DedupTracker:
    """Filters candidates against what a viewer has already been shown.

    filter() never mutates state; record() is the only write and is atomic
    per viewer through the store. Two concurrent requests from the same
    viewer can therefore both pass the same snippet, which is accepted.
    """

    def __init__(self, store: IDedupStore):
        self.store = store

    def filter(
        self,
        viewer_key: str,
        candidates: Sequence[str],
        exclude: Iterable[str] = (),
    ) -> FilterResult:
        """Keep candidates the viewer has not seen, preserving order.

        Args:
            viewer_key: Dedup scope
            candidates: Snippets in presentation order
            exclude: Snippets already accepted for the current response

        Returns:
            FilterResult with unique snippets (original text) and duplicate count
        """
        seen = set(self.store.snapshot(viewer_key))
        seen.update(FingerprintService.fingerprint(text) for text in exclude)

        unique: list[str] = []
        duplicates = 0
        for candidate in candidates:
            fingerprint = FingerprintService.fingerprint(candidate)
            if not fingerprint or fingerprint in seen:
                duplicates += 1
                continue
            seen.add(fingerprint)
            unique.append(candidate)

        if duplicates:
            logger.debug(
                "dedup_filtered",
                viewer=FingerprintService.hash_viewer_key(viewer_key),
                candidates=len(candidates),
                duplicates=duplicates,
            )
        return FilterResult(unique=unique, duplicate_count=duplicates)

    def record(self, viewer_key: str, accepted: Iterable[str]) -> None:
        """Remember snippets as shown to the viewer."""
        fingerprints = [FingerprintService.fingerprint(text) for text in accepted]
        if fingerprints:
            self.store.add(viewer_key, fingerprints)

    def seen_count(self, viewer_key: str) -> int:
        return self.store.size(viewer_key)
