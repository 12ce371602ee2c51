"""Domain entities."""

from .cache_entry import CacheEntry
from .snippet import GeneratedBatch, GenerationRequest, GenerationResult, SubTopicOption

__all__ = [
    "CacheEntry",
    "GeneratedBatch",
    "GenerationRequest",
    "GenerationResult",
    "SubTopicOption",
]
