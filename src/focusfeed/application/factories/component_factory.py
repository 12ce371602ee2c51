"""Factory for creating generation pipeline components."""

from __future__ import annotations

from typing import Any

from ...config_settings import Config
from ...domain.interfaces.dedup_store import IDedupStore
from ...domain.interfaces.generation_cache import IGenerationCache
from ...domain.interfaces.text_provider import ITextProvider
from ...infrastructure.cache.generation_cache import InMemoryGenerationCache
from ...infrastructure.dedup_store import InMemoryDedupStore
from ...providers.factory import ProviderFactory
from ...utils.logging import get_logger
from ..services.dedup_tracker import DedupTracker
from ..services.fallback_library import FallbackLibrary
from ..services.generation_orchestrator import (
    GenerationOrchestrator,
    GenerationOrchestratorConfig,
)
from ..services.response_parser import ResponseParser
from ..services.topic_popularity import TopicPopularityTracker

logger = get_logger(__name__)


class ComponentFactory:
    """Factory for creating and configuring pipeline components.

    The cache, dedup store and popularity tracker are process-wide, so each
    is created once per factory and shared by every orchestrator it builds.
    """

    def __init__(self, config: Config, provider: ITextProvider | None = None):
        """Initialize factory.

        Args:
            config: Application configuration
            provider: Pre-built provider; built from config when None
        """
        self.config = config
        self._provider = provider
        self._cache: InMemoryGenerationCache | None = None
        self._dedup_store: InMemoryDedupStore | None = None
        self._popularity: TopicPopularityTracker | None = None

    def create_provider(self, **overrides: Any) -> ITextProvider:
        """Create the configured text provider.

        Returns:
            Configured ITextProvider implementation
        """
        if self._provider is None:
            self._provider = ProviderFactory.create_from_config(self.config, **overrides)
        return self._provider

    def create_cache(self) -> IGenerationCache:
        """Create the shared generation cache.

        Waiters on an in-flight generation give up after the provider
        timeout plus the configured slack.
        """
        if self._cache is None:
            cache_config = self.config.cache
            self._cache = InMemoryGenerationCache(
                default_ttl=cache_config.ttl_seconds,
                shard_count=cache_config.shard_count,
                wait_timeout=self.config.llm_timeout + cache_config.wait_slack_seconds,
            )
        return self._cache

    def create_dedup_store(self) -> IDedupStore:
        if self._dedup_store is None:
            dedup_config = self.config.dedup
            self._dedup_store = InMemoryDedupStore(
                capacity=dedup_config.capacity,
                max_viewers=dedup_config.max_viewers,
                shard_count=dedup_config.shard_count,
            )
        return self._dedup_store

    def create_popularity_tracker(self) -> TopicPopularityTracker:
        if self._popularity is None:
            self._popularity = TopicPopularityTracker()
        return self._popularity

    def create_orchestrator(self) -> GenerationOrchestrator:
        """Create a fully wired generation orchestrator.

        Returns:
            GenerationOrchestrator sharing this factory's cache and stores
        """
        generation = self.config.generation
        orchestrator = GenerationOrchestrator(
            provider=self.create_provider(),
            cache=self.create_cache(),
            dedup_tracker=DedupTracker(self.create_dedup_store()),
            parser=ResponseParser(max_options=generation.max_options),
            fallback=FallbackLibrary(max_options=generation.max_options),
            popularity=self.create_popularity_tracker(),
            config=GenerationOrchestratorConfig(
                max_count=generation.max_count,
                max_topic_length=generation.max_topic_length,
                max_topup_attempts=generation.max_topup_attempts,
                max_options=generation.max_options,
                provider_timeout=self.config.llm_timeout,
                cache_ttl=self.config.cache.ttl_seconds,
            ),
        )
        logger.info(
            "pipeline_components_created",
            provider=self.config.llm_provider,
            cache_ttl=self.config.cache.ttl_seconds,
            dedup_capacity=self.config.dedup.capacity,
        )
        return orchestrator

    def start_background_tasks(self) -> None:
        """Start the periodic cache sweeper."""
        cache = self.create_cache()
        if isinstance(cache, InMemoryGenerationCache):
            cache.start_sweeper(self.config.cache.sweep_interval_seconds)

    def shutdown(self) -> None:
        """Stop background tasks and close the provider's HTTP client."""
        if self._cache is not None:
            self._cache.stop_sweeper()
        close = getattr(self._provider, "close", None)
        if callable(close):
            close()
