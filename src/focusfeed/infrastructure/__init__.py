"""Infrastructure layer package."""

from .cache.generation_cache import InMemoryGenerationCache
from .dedup_store import InMemoryDedupStore

__all__ = [
    "InMemoryDedupStore",
    "InMemoryGenerationCache",
]
