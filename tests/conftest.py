"""Pytest configuration and fixtures for the test suite."""

import pytest

from focusfeed.application.services.dedup_tracker import DedupTracker
from focusfeed.application.services.generation_orchestrator import (
    GenerationOrchestrator,
    GenerationOrchestratorConfig,
)
from focusfeed.config_loader import reset_config
from focusfeed.infrastructure.cache.generation_cache import InMemoryGenerationCache
from focusfeed.infrastructure.dedup_store import InMemoryDedupStore
from tests.fixtures import MockTextProvider


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Keep tests independent of the developer's environment and config files."""
    for name in (
        "FOCUSFEED_CONFIG",
        "LLM_PROVIDER",
        "GEMINI_API_KEY",
        "OPENAI_API_KEY",
        "OPENROUTER_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def fake_clock():
    """Provide a controllable clock for cache expiry tests."""
    return FakeClock()


@pytest.fixture
def mock_provider():
    """Provide a mock text provider for testing."""
    return MockTextProvider()


@pytest.fixture
def generation_cache(fake_clock):
    """Provide a generation cache driven by the fake clock."""
    return InMemoryGenerationCache(
        default_ttl=3600.0, shard_count=4, wait_timeout=5.0, clock=fake_clock
    )


@pytest.fixture
def dedup_store():
    """Provide a dedup store with default capacity."""
    return InMemoryDedupStore()


@pytest.fixture
def dedup_tracker(dedup_store):
    """Provide a dedup tracker over the in-memory store."""
    return DedupTracker(dedup_store)


@pytest.fixture
def orchestrator(mock_provider, generation_cache, dedup_tracker):
    """Provide an orchestrator wired to test doubles."""
    return GenerationOrchestrator(
        provider=mock_provider,
        cache=generation_cache,
        dedup_tracker=dedup_tracker,
        config=GenerationOrchestratorConfig(provider_timeout=1.0),
    )
