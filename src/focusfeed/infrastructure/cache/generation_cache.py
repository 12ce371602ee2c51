"""In-memory TTL cache with single-flight population."""

from __future__ import annotations

import threading
import time
import zlib
from collections.abc import Callable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, TypeVar

from ...domain.entities import CacheEntry
from ...domain.interfaces.generation_cache import IGenerationCache
from ...error_codes import ErrorCode
from ...exceptions import ProviderTimeoutError
from ...utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class _Shard:
    """One lock guarding a slice of the key space."""

    __slots__ = ("entries", "inflight", "lock")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[str, CacheEntry] = {}
        self.inflight: dict[str, Future[Any]] = {}


class InMemoryGenerationCache(IGenerationCache):
    """Process-wide generation cache.

    The key space is split across shards, each with its own lock. Locks are
    only held for dictionary bookkeeping; the generate callable always runs
    outside them. The first caller for a missing key becomes the leader and
    publishes its outcome through a Future that later callers wait on.

    Expired entries are dropped lazily on read, by sweep_expired(), or by the
    optional background sweeper thread.
    """

    def __init__(
        self,
        default_ttl: float = 3600.0,
        shard_count: int = 16,
        wait_timeout: float | None = 17.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            default_ttl: Entry lifetime in seconds when get_or_generate gets no ttl
            shard_count: Number of independently locked shards
            wait_timeout: Longest a waiter blocks on an in-flight generation
            clock: Monotonic time source (injectable for tests)
        """
        if shard_count < 1:
            msg = "shard_count must be at least 1"
            raise ValueError(msg)

        self.default_ttl = default_ttl
        self.wait_timeout = wait_timeout
        self._clock = clock
        self._shards = [_Shard() for _ in range(shard_count)]

        self._stats_lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "coalesced": 0, "expired": 0}

        self._sweeper: threading.Thread | None = None
        self._sweeper_stop = threading.Event()

        logger.debug(
            "generation_cache_initialized",
            default_ttl=default_ttl,
            shard_count=shard_count,
            wait_timeout=wait_timeout,
        )

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[zlib.crc32(key.encode("utf-8")) % len(self._shards)]

    def _count(self, stat: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._stats[stat] += amount

    def get_or_generate(
        self, key: str, generate: Callable[[], T], ttl: float | None = None
    ) -> T:
        shard = self._shard_for(key)

        with shard.lock:
            entry = shard.entries.get(key)
            if entry is not None:
                if not entry.is_expired(self._clock()):
                    self._count("hits")
                    logger.debug("generation_cache_hit", key=key)
                    return entry.value
                del shard.entries[key]
                self._count("expired")

            future = shard.inflight.get(key)
            is_leader = future is None
            if future is None:
                future = Future()
                shard.inflight[key] = future

        if not is_leader:
            self._count("coalesced")
            logger.debug("generation_cache_coalesced", key=key)
            try:
                return future.result(timeout=self.wait_timeout)
            except FutureTimeoutError as e:
                msg = "Timed out waiting for in-flight generation"
                raise ProviderTimeoutError(
                    msg,
                    error_code=ErrorCode.PRV_WAIT_TIMEOUT.value,
                    context={"key": key, "wait_timeout": self.wait_timeout},
                ) from e

        self._count("misses")
        logger.debug("generation_cache_miss", key=key)

        try:
            value = generate()
        except BaseException as e:
            # Failures are not stored; every waiter gets the same exception.
            with shard.lock:
                shard.inflight.pop(key, None)
            future.set_exception(e)
            raise

        effective_ttl = self.default_ttl if ttl is None else ttl
        now = self._clock()
        with shard.lock:
            shard.entries[key] = CacheEntry(
                key=key,
                value=value,
                created_at=now,
                expires_at=now + effective_ttl,
            )
            shard.inflight.pop(key, None)
        future.set_result(value)

        logger.debug("generation_cache_stored", key=key, ttl=effective_ttl)
        return value

    def invalidate(self, key: str) -> bool:
        shard = self._shard_for(key)
        with shard.lock:
            return shard.entries.pop(key, None) is not None

    def sweep_expired(self) -> int:
        removed = 0
        now = self._clock()
        for shard in self._shards:
            with shard.lock:
                expired = [k for k, e in shard.entries.items() if e.is_expired(now)]
                for key in expired:
                    del shard.entries[key]
            removed += len(expired)

        if removed:
            self._count("expired", removed)
            logger.info("generation_cache_swept", removed=removed)
        return removed

    def clear(self) -> None:
        """Drop every stored entry (in-flight generations are unaffected)."""
        for shard in self._shards:
            with shard.lock:
                shard.entries.clear()

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total

    def get_stats(self) -> dict[str, Any]:
        with self._stats_lock:
            stats: dict[str, Any] = dict(self._stats)
        lookups = stats["hits"] + stats["misses"] + stats["coalesced"]
        stats["size"] = len(self)
        stats["hit_ratio"] = (
            (stats["hits"] + stats["coalesced"]) / lookups if lookups else 0.0
        )
        return stats

    def start_sweeper(self, interval: float) -> None:
        """Start a daemon thread calling sweep_expired() every interval seconds."""
        if self._sweeper is not None and self._sweeper.is_alive():
            return

        self._sweeper_stop.clear()

        def _run() -> None:
            while not self._sweeper_stop.wait(interval):
                self.sweep_expired()

        self._sweeper = threading.Thread(
            target=_run, name="generation-cache-sweeper", daemon=True
        )
        self._sweeper.start()
        logger.debug("generation_cache_sweeper_started", interval=interval)

    def stop_sweeper(self, timeout: float | None = 5.0) -> None:
        """Stop the background sweeper, if running."""
        if self._sweeper is None:
            return
        self._sweeper_stop.set()
        self._sweeper.join(timeout=timeout)
        self._sweeper = None
        logger.debug("generation_cache_sweeper_stopped")
