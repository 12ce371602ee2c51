"""Application services package."""

from .dedup_tracker import DedupTracker, FilterResult
from .fallback_library import FallbackContent, FallbackLibrary, OptionRule
from .generation_orchestrator import (
    GenerationOrchestrator,
    GenerationOrchestratorConfig,
)
from .response_parser import ParsedResponse, ResponseParser, extract_json_object
from .topic_popularity import DEFAULT_POPULAR_TOPICS, TopicPopularityTracker

__all__ = [
    "DEFAULT_POPULAR_TOPICS",
    "DedupTracker",
    "FallbackContent",
    "FallbackLibrary",
    "FilterResult",
    "GenerationOrchestrator",
    "GenerationOrchestratorConfig",
    "OptionRule",
    "ParsedResponse",
    "ResponseParser",
    "TopicPopularityTracker",
    "extract_json_object",
]
