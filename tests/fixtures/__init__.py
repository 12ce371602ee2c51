"""Test fixtures package."""

from .mock_text_provider import MockTextProvider, cards_json

__all__ = [
    "MockTextProvider",
    "cards_json",
]
