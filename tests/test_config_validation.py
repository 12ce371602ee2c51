"""Tests for configuration loading and validation."""

import pytest

from focusfeed.config import Config, get_config, load_config, set_config
from focusfeed.error_codes import ErrorCode
from focusfeed.exceptions import ConfigurationError


def test_defaults():
    config = Config(gemini_api_key="k")
    assert config.llm_provider == "gemini"
    assert config.llm_temperature == 0.4
    assert config.llm_max_output_tokens == 800
    assert config.llm_timeout == 15.0
    assert config.cache.ttl_seconds == 3600.0
    assert config.dedup.capacity == 500
    assert config.generation.max_topup_attempts == 5
    assert config.validate_config() is config


def test_provider_name_is_normalized():
    config = Config(llm_provider="  OpenAI ", openai_api_key="k")
    assert config.llm_provider == "openai"


def test_unknown_provider_is_rejected():
    config = Config(llm_provider="ollama")
    with pytest.raises(ConfigurationError, match="Invalid llm_provider"):
        config.validate_config()


def test_missing_api_key_is_rejected():
    config = Config(llm_provider="openai")
    with pytest.raises(ConfigurationError) as exc_info:
        config.validate_config()
    assert exc_info.value.error_code == ErrorCode.CFG_MISSING_KEY.value
    assert "OPENAI_API_KEY" in exc_info.value.message


def test_env_and_nested_env(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "from-env")
    monkeypatch.setenv("CACHE__TTL_SECONDS", "60")
    monkeypatch.setenv("DEDUP__CAPACITY", "25")

    config = load_config()

    assert config.gemini_api_key == "from-env"
    assert config.cache.ttl_seconds == 60.0
    assert config.dedup.capacity == 25


def test_yaml_file(tmp_path):
    path = tmp_path / "custom.yaml"
    path.write_text(
        "llm_provider: openrouter\n"
        "openrouter_api_key: yaml-key\n"
        "generation:\n"
        "  max_topup_attempts: 2\n",
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.llm_provider == "openrouter"
    assert config.generation.max_topup_attempts == 2


def test_yaml_from_env_variable(tmp_path, monkeypatch):
    path = tmp_path / "other.yaml"
    path.write_text("gemini_api_key: k\nlog_level: DEBUG\n", encoding="utf-8")
    monkeypatch.setenv("FOCUSFEED_CONFIG", str(path))

    assert load_config().log_level == "DEBUG"


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("llm_provider: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Failed to parse config file"):
        load_config(path)


def test_out_of_range_value(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("gemini_api_key: k\ncache:\n  shard_count: 0\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as exc_info:
        load_config(path)
    assert exc_info.value.error_code == ErrorCode.CFG_INVALID.value


def test_validation_can_be_skipped():
    config = load_config(validate=False)
    assert config.gemini_api_key == ""


def test_get_config_singleton():
    config = Config(gemini_api_key="k")
    set_config(config)
    assert get_config() is config


def test_provider_settings_for_openrouter():
    config = Config(
        llm_provider="openrouter",
        openrouter_api_key="k",
        openrouter_site_url="https://example.org",
    )
    settings = config.get_provider_settings()
    assert settings["site_url"] == "https://example.org"
    assert settings["base_url"] == "https://openrouter.ai/api/v1"
    assert settings["timeout"] == 15.0
