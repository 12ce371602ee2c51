"""In-memory per-viewer fingerprint store."""

from __future__ import annotations

import threading
import zlib
from collections import OrderedDict
from collections.abc import Iterable

from ..domain.interfaces.dedup_store import IDedupStore
from ..utils.logging import get_logger

logger = get_logger(__name__)


class _ViewerShard:
    __slots__ = ("lock", "viewers")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        # viewer_key -> ordered fingerprints (oldest first); viewers in LRU order
        self.viewers: OrderedDict[str, OrderedDict[str, None]] = OrderedDict()


class InMemoryDedupStore(IDedupStore):
    """Sharded, bounded store of seen fingerprints.

    Each viewer keeps at most ``capacity`` fingerprints, evicting the oldest
    first, so uniqueness is only guaranteed within that window. The number of
    tracked viewers is bounded per shard; the least recently active viewer is
    forgotten first. Nothing survives a restart.
    """

    def __init__(
        self,
        capacity: int = 500,
        max_viewers: int = 10_000,
        shard_count: int = 16,
    ):
        if capacity < 1 or max_viewers < 1 or shard_count < 1:
            msg = "capacity, max_viewers and shard_count must be positive"
            raise ValueError(msg)

        self.capacity = capacity
        self.max_viewers = max_viewers
        self._shards = [_ViewerShard() for _ in range(shard_count)]
        self._viewers_per_shard = max(1, -(-max_viewers // shard_count))

    def _shard_for(self, viewer_key: str) -> _ViewerShard:
        return self._shards[zlib.crc32(viewer_key.encode("utf-8")) % len(self._shards)]

    def snapshot(self, viewer_key: str) -> frozenset[str]:
        shard = self._shard_for(viewer_key)
        with shard.lock:
            seen = shard.viewers.get(viewer_key)
            return frozenset(seen) if seen else frozenset()

    def add(self, viewer_key: str, fingerprints: Iterable[str]) -> None:
        shard = self._shard_for(viewer_key)
        evicted = 0
        with shard.lock:
            seen = shard.viewers.get(viewer_key)
            if seen is None:
                seen = OrderedDict()
                shard.viewers[viewer_key] = seen
            shard.viewers.move_to_end(viewer_key)

            for fingerprint in fingerprints:
                if fingerprint in seen:
                    seen.move_to_end(fingerprint)
                    continue
                seen[fingerprint] = None
                if len(seen) > self.capacity:
                    seen.popitem(last=False)
                    evicted += 1

            dropped_viewers = 0
            while len(shard.viewers) > self._viewers_per_shard:
                shard.viewers.popitem(last=False)
                dropped_viewers += 1

        if evicted or dropped_viewers:
            logger.debug(
                "dedup_store_evicted",
                fingerprints=evicted,
                viewers=dropped_viewers,
            )

    def size(self, viewer_key: str) -> int:
        shard = self._shard_for(viewer_key)
        with shard.lock:
            seen = shard.viewers.get(viewer_key)
            return len(seen) if seen else 0

    def viewer_count(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.viewers)
        return total

    def clear(self, viewer_key: str | None = None) -> None:
        if viewer_key is not None:
            shard = self._shard_for(viewer_key)
            with shard.lock:
                shard.viewers.pop(viewer_key, None)
            return
        for shard in self._shards:
            with shard.lock:
                shard.viewers.clear()
