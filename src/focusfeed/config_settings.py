"""Settings model for the content generation service."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config_models import CacheConfig, DedupConfig, GenerationConfig
from .error_codes import ErrorCode
from .exceptions import ConfigurationError

SUPPORTED_PROVIDERS = ("gemini", "openai", "openrouter")


class Config(BaseSettings):
    """Service configuration using pydantic-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # LLM Provider Configuration
    llm_provider: str = "gemini"

    # Common LLM settings
    llm_temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    llm_max_output_tokens: int = Field(default=800, ge=1)
    llm_timeout: float = Field(
        default=15.0,
        gt=0.0,
        description="Hard timeout in seconds for a single provider call",
    )

    # Gemini provider settings
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"

    # OpenAI provider settings
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_base_url: str = "https://api.openai.com/v1"

    # OpenRouter provider settings
    openrouter_api_key: str = ""
    openrouter_model: str = "google/gemini-2.5-flash"
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_site_url: str | None = None
    openrouter_site_name: str | None = None

    # Pipeline policy
    cache: CacheConfig = Field(default_factory=CacheConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Path | None = Field(
        default=None, description="Directory for JSON log files (console only if unset)"
    )

    @field_validator("llm_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> str:
        """Lower-case and trim the provider name."""
        if v is None:
            return "gemini"
        return str(v).strip().lower()

    @field_validator("log_dir", mode="before")
    @classmethod
    def parse_log_dir(cls, v: Any) -> Path | None:
        """Convert string to Path."""
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v
        msg = f"log_dir must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    def get_provider_settings(self) -> dict[str, Any]:
        """Return constructor kwargs for the configured provider."""
        provider = self.llm_provider
        common: dict[str, Any] = {
            "timeout": self.llm_timeout,
            "temperature": self.llm_temperature,
            "max_output_tokens": self.llm_max_output_tokens,
        }
        if provider == "gemini":
            return {
                **common,
                "api_key": self.gemini_api_key,
                "model": self.gemini_model,
                "base_url": self.gemini_base_url,
            }
        if provider == "openai":
            return {
                **common,
                "api_key": self.openai_api_key,
                "model": self.openai_model,
                "base_url": self.openai_base_url,
            }
        if provider == "openrouter":
            return {
                **common,
                "api_key": self.openrouter_api_key,
                "model": self.openrouter_model,
                "base_url": self.openrouter_base_url,
                "site_url": self.openrouter_site_url,
                "site_name": self.openrouter_site_name,
            }
        msg = f"Invalid llm_provider: {provider}"
        raise ConfigurationError(msg, error_code=ErrorCode.CFG_INVALID.value)

    def validate_config(self) -> Config:
        """Validate cross-field configuration values."""
        if self.llm_provider not in SUPPORTED_PROVIDERS:
            msg = (
                f"Invalid llm_provider: {self.llm_provider}. "
                f"Must be one of: {', '.join(SUPPORTED_PROVIDERS)}"
            )
            raise ConfigurationError(
                msg,
                suggestion=f"Set llm_provider to one of: {', '.join(SUPPORTED_PROVIDERS)}",
                error_code=ErrorCode.CFG_INVALID.value,
            )

        api_key = self.get_provider_settings()["api_key"]
        if not api_key:
            env_name = f"{self.llm_provider.upper()}_API_KEY"
            msg = f"{env_name} is not defined"
            raise ConfigurationError(
                msg,
                suggestion=f"Set {env_name} environment variable or {env_name.lower()} in config.yaml",
                error_code=ErrorCode.CFG_MISSING_KEY.value,
            )

        if self.generation.default_count > self.generation.max_count:
            msg = "generation.default_count cannot exceed generation.max_count"
            raise ConfigurationError(msg, error_code=ErrorCode.CFG_INVALID.value)

        return self
