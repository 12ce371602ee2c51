"""OpenAI-compatible chat completion providers (OpenAI, OpenRouter)."""

from typing import Any

import httpx

from .base import BaseTextProvider


class OpenAIProvider(BaseTextProvider):
    """Provider for the OpenAI chat completions API.

    Configuration:
        api_key: OpenAI API key (required)
        model: Model name (default: gpt-4o-mini)
        base_url: API endpoint URL (default: https://api.openai.com/v1)
        timeout: Hard timeout per call in seconds (default: 15.0)
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        **kwargs: Any,
    ):
        super().__init__(api_key=api_key, model=model, base_url=base_url, **kwargs)

    def _build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": self.temperature,
            "max_tokens": self.max_output_tokens,
            "response_format": {"type": "json_object"},
        }

    def _build_request(self, prompt: str, timeout: float) -> httpx.Request:
        return self.client.build_request(
            "POST",
            f"{self.base_url}/chat/completions",
            json=self._build_payload(prompt),
            headers=self._build_headers(),
            timeout=timeout,
        )

    def _extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return ""
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        return content if isinstance(content, str) else ""


class OpenRouterProvider(OpenAIProvider):
    """Provider for OpenRouter's OpenAI-compatible endpoint.

    Adds the optional attribution headers OpenRouter uses for app rankings.
    """

    DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
    DEFAULT_MODEL = "google/gemini-2.5-flash"

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        site_url: str | None = None,
        site_name: str | None = None,
        **kwargs: Any,
    ):
        self.site_url = site_url
        self.site_name = site_name
        super().__init__(
            api_key=api_key,
            model=model,
            base_url=base_url,
            site_url=site_url,
            site_name=site_name,
            **kwargs,
        )

    def _build_headers(self) -> dict[str, str]:
        headers = super()._build_headers()
        if self.site_url:
            headers["HTTP-Referer"] = self.site_url
        if self.site_name:
            headers["X-Title"] = self.site_name
        return headers
