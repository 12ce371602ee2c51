"""Interface for upstream text-generation providers."""

from abc import ABC, abstractmethod
from typing import Any


class ITextProvider(ABC):
    """Uniform text-completion contract.

    Any upstream backend (HTTP completion API, local model, test double)
    is adapted to a single prompt-in, text-out call.
    """

    @abstractmethod
    def complete(
        self, prompt: str, timeout: float | None = None, **log_context: Any
    ) -> str:
        """Complete a prompt.

        Args:
            prompt: Full prompt text
            timeout: Hard timeout in seconds (provider default if None)
            **log_context: Extra fields for the per-call log record

        Returns:
            Raw completion text

        Raises:
            ProviderTimeoutError: The call exceeded the timeout
            RateLimitedError: Upstream signalled throttling
            ProviderUnavailableError: Any other upstream failure
            InvalidResponseError: Successful response without text
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get human-readable provider name."""
