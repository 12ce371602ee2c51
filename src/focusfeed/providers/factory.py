"""Provider factory for creating text provider instances."""

from typing import Any

from focusfeed.error_codes import ErrorCode
from focusfeed.exceptions import ConfigurationError
from focusfeed.utils.logging import get_logger

from .base import BaseTextProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider, OpenRouterProvider

logger = get_logger(__name__)


class ProviderFactory:
    """Factory for creating text provider instances.

    Supports Gemini, OpenAI and OpenRouter; every provider is adapted to
    the same complete(prompt) contract.
    """

    PROVIDER_MAP: dict[str, type[BaseTextProvider]] = {
        "gemini": GeminiProvider,
        "google": GeminiProvider,  # Alias
        "openai": OpenAIProvider,
        "openrouter": OpenRouterProvider,
    }

    @classmethod
    def create_provider(cls, provider_type: str, **kwargs: Any) -> BaseTextProvider:
        """Create a provider instance based on type.

        Args:
            provider_type: Provider type ("gemini", "openai", "openrouter")
            **kwargs: Provider-specific configuration parameters

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If provider_type is not supported

        Examples:
            >>> provider = ProviderFactory.create_provider(
            ...     "gemini",
            ...     api_key="AIza...",
            ... )
        """
        provider_type_lower = provider_type.lower()

        if provider_type_lower not in cls.PROVIDER_MAP:
            available = ", ".join(sorted(cls.PROVIDER_MAP.keys()))
            msg = (
                f"Unsupported provider type: {provider_type}. "
                f"Available providers: {available}"
            )
            raise ValueError(msg)

        provider_class = cls.PROVIDER_MAP[provider_type_lower]
        logger.debug(
            "creating_provider",
            provider_type=provider_type_lower,
            provider_class=provider_class.__name__,
        )

        try:
            return provider_class(**kwargs)
        except (TypeError, ValueError) as e:
            logger.error(
                "provider_creation_failed",
                provider_type=provider_type_lower,
                error=str(e),
            )
            raise

    @classmethod
    def create_from_config(cls, config: Any, **overrides: Any) -> BaseTextProvider:
        """Create a provider instance from a Config object.

        Args:
            config: Configuration object with provider settings
            **overrides: Constructor kwargs that replace config values (e.g. client)

        Returns:
            Initialized provider instance

        Raises:
            ConfigurationError: If the configured provider cannot be built
        """
        provider_type = config.llm_provider
        kwargs = {**config.get_provider_settings(), **overrides}

        try:
            return cls.create_provider(provider_type, **kwargs)
        except ValueError as e:
            msg = f"Cannot create provider {provider_type}: {e}"
            raise ConfigurationError(
                msg,
                suggestion=f"Check llm_provider and {provider_type}_api_key settings",
                error_code=ErrorCode.CFG_INVALID.value,
            ) from e

    @classmethod
    def list_supported_providers(cls) -> list[str]:
        """List all supported provider types."""
        return sorted(set(cls.PROVIDER_MAP.keys()))
