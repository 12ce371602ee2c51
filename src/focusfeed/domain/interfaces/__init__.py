"""Domain interfaces."""

from .dedup_store import IDedupStore
from .generation_cache import IGenerationCache
from .text_provider import ITextProvider

__all__ = [
    "IDedupStore",
    "IGenerationCache",
    "ITextProvider",
]
