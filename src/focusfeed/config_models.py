"""Config sub-models for caching, deduplication and generation policy."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CacheConfig(BaseModel):
    """Generation cache configuration."""

    ttl_seconds: float = Field(default=3600.0, gt=0.0)
    shard_count: int = Field(default=16, ge=1)
    sweep_interval_seconds: float = Field(default=300.0, gt=0.0)
    wait_slack_seconds: float = Field(default=2.0, ge=0.0)


class DedupConfig(BaseModel):
    """Per-viewer deduplication configuration."""

    capacity: int = Field(default=500, ge=1)
    max_viewers: int = Field(default=10_000, ge=1)
    shard_count: int = Field(default=16, ge=1)


class GenerationConfig(BaseModel):
    """Orchestrator policy configuration."""

    default_count: int = Field(default=5, ge=1, le=10)
    max_count: int = Field(default=10, ge=1, le=10)
    max_topic_length: int = Field(default=200, ge=1)
    max_topup_attempts: int = Field(default=5, ge=1)
    max_options: int = Field(default=4, ge=0, le=4)


__all__ = [
    "CacheConfig",
    "DedupConfig",
    "GenerationConfig",
]
