"""Infrastructure cache package."""

from .generation_cache import InMemoryGenerationCache

__all__ = [
    "InMemoryGenerationCache",
]
