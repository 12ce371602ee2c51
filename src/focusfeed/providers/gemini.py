"""Google Gemini provider using the Generative Language REST API."""

from typing import Any

import httpx

from .base import BaseTextProvider


class GeminiProvider(BaseTextProvider):
    """Provider for Gemini generateContent.

    Requests JSON output (responseMimeType) at a low temperature so the
    snippets stay consistent between calls.

    Configuration:
        api_key: Gemini API key (required)
        model: Model name (default: gemini-2.5-flash)
        base_url: API endpoint URL
        timeout: Hard timeout per call in seconds (default: 15.0)
    """

    DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    DEFAULT_MODEL = "gemini-2.5-flash"

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
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_output_tokens,
                "responseMimeType": "application/json",
            },
        }

    def _build_request(self, prompt: str, timeout: float) -> httpx.Request:
        return self.client.build_request(
            "POST",
            f"{self.base_url}/models/{self.model}:generateContent",
            json=self._build_payload(prompt),
            headers=self._build_headers(),
            timeout=timeout,
        )

    def _extract_text(self, data: Any) -> str:
        if not isinstance(data, dict):
            return ""
        candidates = data.get("candidates") or []
        if not candidates or not isinstance(candidates[0], dict):
            return ""
        content = candidates[0].get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            return ""
        return "".join(
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
