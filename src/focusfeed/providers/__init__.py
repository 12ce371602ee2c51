"""Text generation providers."""

from .base import BaseTextProvider
from .factory import ProviderFactory
from .gemini import GeminiProvider
from .openai import OpenAIProvider, OpenRouterProvider

__all__ = [
    "BaseTextProvider",
    "GeminiProvider",
    "OpenAIProvider",
    "OpenRouterProvider",
    "ProviderFactory",
]
