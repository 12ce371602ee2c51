"""Config loader utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .config_settings import Config
from .error_codes import ErrorCode
from .exceptions import ConfigurationError
from .utils.logging import get_logger

_config: Config | None = None


def _candidate_paths(config_path: Path | None) -> list[Path]:
    if config_path:
        return [config_path.expanduser()]
    candidates: list[Path] = []
    env_path = os.getenv("FOCUSFEED_CONFIG")
    if env_path:
        candidates.append(Path(env_path).expanduser())
    candidates.append(Path.cwd() / "config.yaml")
    return candidates


def load_config(
    config_path: Path | None = None, *, validate: bool = True
) -> Config:
    """Load configuration from .env, environment and config.yaml.

    Values from config.yaml are passed as explicit settings, so they take
    precedence over environment variables and .env entries.
    """
    logger = get_logger(__name__)

    candidate_paths = _candidate_paths(config_path)
    resolved_config_path = next((p for p in candidate_paths if p.exists()), None)

    if resolved_config_path is None:
        logger.debug(
            "config_file_not_found", searched_paths=[str(p) for p in candidate_paths]
        )

    yaml_data: dict[str, Any] = {}
    if resolved_config_path:
        try:
            with open(resolved_config_path, encoding="utf-8") as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(
                "config_yaml_load_error",
                config_path=str(resolved_config_path),
                error=str(e),
                error_type=type(e).__name__,
            )
            msg = f"Failed to parse config file: {resolved_config_path}"
            raise ConfigurationError(
                msg,
                suggestion=(
                    "Check YAML syntax (indentation, colons, quotes). "
                    f"Original error: {e}"
                ),
            ) from e

        if not isinstance(yaml_data, dict):
            msg = f"Config file must contain a mapping: {resolved_config_path}"
            raise ConfigurationError(msg)

        logger.info(
            "config_file_found",
            config_path=str(resolved_config_path),
            keys_count=len(yaml_data),
        )

    try:
        config = Config(**yaml_data)
    except ValidationError as e:
        msg = f"Invalid configuration: {e.error_count()} validation error(s)"
        raise ConfigurationError(
            msg,
            suggestion=str(e),
            error_code=ErrorCode.CFG_INVALID.value,
        ) from e
    if validate:
        config.validate_config()

    logger.info(
        "config_loaded",
        llm_provider=config.llm_provider,
        cache_ttl=config.cache.ttl_seconds,
        dedup_capacity=config.dedup.capacity,
    )
    return config


def get_config() -> Config:
    """Get singleton config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Set singleton config instance (for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset global config instance (for testing only)."""
    global _config
    _config = None


__all__ = ["Config", "get_config", "load_config", "reset_config", "set_config"]
