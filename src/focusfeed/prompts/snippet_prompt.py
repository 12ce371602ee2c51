"""Prompt construction for snippet generation."""

from __future__ import annotations

_BASE_PROMPT = """You are an expert educator creating short-form mobile learning content.

TASK:
Create exactly {count} learning snippets about: "{topic}"
{continuation}
RULES:
- Each snippet must be 1-2 sentences
- Clear, practical, and memorable
- No emojis
- No markdown
- No numbering
- No explanations outside the JSON object
{options_rule}
OUTPUT FORMAT (STRICT JSON ONLY):
{output_format}
"""

_CONTINUATION = """
These snippets continue an existing feed (page {page}). Every snippet must be
different from the previous one: "{last_snippet}"
"""

_OPTIONS_RULE = (
    "- Also suggest {max_options} related sub-topics to explore further, "
    "each with a short title and a one-line description\n"
)

_FORMAT_CARDS = """{
  "cards": [
    {"text": "First snippet"},
    {"text": "Second snippet"}
  ]
}"""

_FORMAT_CARDS_WITH_OPTIONS = """{
  "cards": [
    {"text": "First snippet"},
    {"text": "Second snippet"}
  ],
  "options": [
    {"title": "Sub-topic", "description": "Why it is worth exploring"}
  ]
}"""


def build_snippet_prompt(
    topic: str,
    count: int,
    generate_options: bool = False,
    page: int = 0,
    last_snippet: str = "",
    max_options: int = 4,
) -> str:
    """Build the generation prompt.

    Args:
        topic: Display form of the topic
        count: Exact number of snippets to ask for
        generate_options: Whether to ask for sub-topic suggestions
        page: Feed page being generated
        last_snippet: Last snippet of the previous page, if any
        max_options: Number of sub-topics to ask for

    Returns:
        Prompt text
    """
    continuation = ""
    if last_snippet:
        continuation = _CONTINUATION.format(page=page, last_snippet=last_snippet)

    return _BASE_PROMPT.format(
        count=count,
        topic=topic,
        continuation=continuation,
        options_rule=(
            _OPTIONS_RULE.format(max_options=max_options) if generate_options else ""
        ),
        output_format=(
            _FORMAT_CARDS_WITH_OPTIONS if generate_options else _FORMAT_CARDS
        ),
    )
