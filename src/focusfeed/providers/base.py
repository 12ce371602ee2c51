"""Base text provider for HTTP completion APIs."""

import threading
import time
from abc import abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Any

import httpx

from focusfeed.domain.interfaces.text_provider import ITextProvider
from focusfeed.error_codes import ErrorCode
from focusfeed.exceptions import (
    InvalidResponseError,
    ProviderError,
    ProviderTimeoutError,
)
from focusfeed.utils.logging import get_logger

from .error_handler import classify_exception

logger = get_logger(__name__)


class BaseTextProvider(ITextProvider):
    """Abstract base class for HTTP text-generation providers.

    Subclasses only describe the wire format: how to send a prompt and how
    to pull the completion text out of a decoded response. The base class
    owns the timeout, failure classification and the per-call log record.
    The timeout is a total deadline for the call: the request runs on a worker
    thread, and a response body still arriving when it expires is abandoned.
    There is no retry policy; the orchestrator falls back instead.
    """

    DEFAULT_TIMEOUT = 15.0
    MAX_WORKERS = 50

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        temperature: float = 0.4,
        max_output_tokens: int = 800,
        client: httpx.Client | None = None,
        **kwargs: Any,
    ):
        """Initialize the provider.

        Args:
            api_key: Provider API key
            model: Model identifier
            base_url: API base URL
            timeout: Default hard timeout per call in seconds
            temperature: Sampling temperature
            max_output_tokens: Completion token limit
            client: Pre-built httpx client (tests and connection sharing)
            **kwargs: Provider-specific options
        """
        if not api_key:
            msg = f"{self.__class__.__name__} requires an API key"
            raise ValueError(msg)

        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.config = {
            "api_key": api_key,
            "model": model,
            "base_url": self.base_url,
            "timeout": timeout,
            **kwargs,
        }
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=50),
            headers=self._build_headers(),
        )
        self._executor = ThreadPoolExecutor(
            max_workers=self.MAX_WORKERS,
            thread_name_prefix=f"{self.get_provider_name().lower()}-call",
        )

        logger.info(
            "provider_initialized",
            provider=self.get_provider_name(),
            config=self._safe_config_for_logging(),
        )

    def _safe_config_for_logging(self) -> dict[str, Any]:
        """Return config with sensitive data redacted for logging."""
        safe_config = self.config.copy()
        for key in ["api_key", "token", "password"]:
            if key in safe_config:
                safe_config[key] = "***REDACTED***"
        return safe_config

    def _build_headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    @abstractmethod
    def _build_request(self, prompt: str, timeout: float) -> httpx.Request:
        """Build the HTTP request for a prompt."""

    def _send(
        self,
        prompt: str,
        timeout: float,
        deadline: float,
        abandoned: threading.Event,
    ) -> httpx.Response:
        """Send a request and read its body, stopping at the deadline.

        Runs on a worker thread. The body is streamed so a slow upstream
        cannot outlive the deadline by trickling bytes.
        """
        request = self._build_request(prompt, timeout)
        response = self.client.send(request, stream=True)
        chunks = []
        try:
            for chunk in response.iter_raw():
                if abandoned.is_set() or time.monotonic() >= deadline:
                    msg = f"Response body not complete within {timeout:g}s"
                    raise httpx.ReadTimeout(msg, request=request)
                chunks.append(chunk)
        finally:
            response.close()

        return httpx.Response(
            response.status_code,
            headers=response.headers,
            content=b"".join(chunks),
            request=request,
        )

    @abstractmethod
    def _extract_text(self, data: Any) -> str:
        """Return completion text from a decoded response ("" if absent)."""

    def complete(
        self, prompt: str, timeout: float | None = None, **log_context: Any
    ) -> str:
        """Complete a prompt with a hard timeout and classified failures."""
        effective_timeout = timeout if timeout is not None else self.timeout
        start_time = time.perf_counter()
        outcome = "error"
        abandoned = threading.Event()
        try:
            try:
                future = self._executor.submit(
                    self._send,
                    prompt,
                    effective_timeout,
                    time.monotonic() + effective_timeout,
                    abandoned,
                )
                response = future.result(timeout=effective_timeout)
                response.raise_for_status()
            except FuturesTimeoutError as e:
                abandoned.set()
                msg = (
                    f"{self.get_provider_name()} request timed out after "
                    f"{effective_timeout:g}s"
                )
                raise ProviderTimeoutError(
                    msg,
                    error_code=ErrorCode.PRV_TIMEOUT.value,
                    context={
                        "provider": self.get_provider_name(),
                        "model": self.model,
                        "timeout": effective_timeout,
                    },
                ) from e
            except httpx.HTTPError as e:
                raise classify_exception(
                    e, self.get_provider_name(), self.model, effective_timeout
                ) from e

            try:
                data = response.json()
            except ValueError as e:
                msg = f"{self.get_provider_name()} returned a non-JSON body"
                raise InvalidResponseError(
                    msg,
                    error_code=ErrorCode.PRV_EMPTY_COMPLETION.value,
                    context={"body": response.text[:200]},
                ) from e

            text = self._extract_text(data)
            if not text or not text.strip():
                msg = f"Empty response from {self.get_provider_name()}"
                raise InvalidResponseError(
                    msg,
                    error_code=ErrorCode.PRV_EMPTY_COMPLETION.value,
                    context={"model": self.model},
                )
            outcome = "success"
            return text
        except ProviderError as e:
            outcome = e.failure_kind
            raise
        finally:
            duration = round(time.perf_counter() - start_time, 3)
            log = logger.info if outcome == "success" else logger.warning
            log(
                "provider_call_completed",
                provider=self.get_provider_name(),
                model=self.model,
                duration=duration,
                outcome=outcome,
                prompt_length=len(prompt),
                **log_context,
            )

    def get_provider_name(self) -> str:
        """Get the human-readable name of this provider."""
        return self.__class__.__name__.replace("Provider", "")

    def close(self) -> None:
        """Release call workers and close the HTTP client if this provider created it."""
        self._executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_client:
            self.client.close()

    def __repr__(self) -> str:
        """String representation of the provider."""
        return f"{self.__class__.__name__}(config={self._safe_config_for_logging()})"
