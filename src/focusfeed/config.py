"""Configuration entrypoint (re-exported from split modules)."""

from .config_loader import get_config, load_config, reset_config, set_config
from .config_models import CacheConfig, DedupConfig, GenerationConfig
from .config_settings import SUPPORTED_PROVIDERS, Config

__all__ = [
    "SUPPORTED_PROVIDERS",
    "CacheConfig",
    "Config",
    "DedupConfig",
    "GenerationConfig",
    "get_config",
    "load_config",
    "reset_config",
    "set_config",
]
