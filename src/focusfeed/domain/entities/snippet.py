"""Domain entities for generated learning snippets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SubTopicOption:
    """Value object for an "explore further" suggestion."""

    title: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "description": self.description}


@dataclass(frozen=True)
class GenerationRequest:
    """A request for one page of snippets.

    Validation happens in the orchestrator so that bad input surfaces as
    BadRequestError rather than at construction time.
    """

    topic: str
    viewer_key: str
    count: int = 5
    cursor: str | None = None
    generate_options: bool = False


@dataclass(frozen=True)
class GeneratedBatch:
    """Candidate cards and options produced for one cache key.

    Shared across viewers through the generation cache, so it is immutable.
    """

    cards: tuple[str, ...]
    options: tuple[SubTopicOption, ...] = ()


@dataclass(frozen=True)
class GenerationResult:
    """Final page returned to the caller."""

    snippets: list[str]
    next_cursor: str
    options: list[SubTopicOption] = field(default_factory=list)
    used_fallback: bool = False
    cache_hit: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "snippets": list(self.snippets),
            "options": [option.to_dict() for option in self.options],
            "nextCursor": self.next_cursor,
        }
