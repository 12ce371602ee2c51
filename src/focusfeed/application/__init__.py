"""Application layer for the FocusFeed generation pipeline.

This package contains the application services and the factory that wires
them to providers and in-memory stores.
"""

from .factories.component_factory import ComponentFactory
from .services.dedup_tracker import DedupTracker
from .services.fallback_library import FallbackLibrary
from .services.generation_orchestrator import (
    GenerationOrchestrator,
    GenerationOrchestratorConfig,
)
from .services.response_parser import ResponseParser
from .services.topic_popularity import TopicPopularityTracker

__all__ = [
    # Factories
    "ComponentFactory",
    # Services
    "DedupTracker",
    "FallbackLibrary",
    "GenerationOrchestrator",
    "GenerationOrchestratorConfig",
    "ResponseParser",
    "TopicPopularityTracker",
]
