"""Extraction and decoding of snippet JSON from raw provider text.

Models often wrap their JSON in markdown fences, add a sentence of
preamble, or append trailing commentary. The parser locates the first
balanced top-level object and decodes only that span. It never attempts
repair: anything it cannot decode cleanly is a MalformedResponseError and
the orchestrator falls back.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from focusfeed.domain.entities import SubTopicOption
from focusfeed.error_codes import ErrorCode
from focusfeed.exceptions import MalformedResponseError
from focusfeed.utils.logging import get_logger

logger = get_logger(__name__)

MAX_OPTIONS = 4


@dataclass(frozen=True)
class ParsedResponse:
    """Decoded provider output."""

    cards: list[str] = field(default_factory=list)
    options: list[SubTopicOption] = field(default_factory=list)


def extract_json_object(text: str) -> str:
    """Return the first balanced {...} span in text.

    Braces inside string literals (including escaped quotes) do not count
    towards the balance.

    Raises:
        MalformedResponseError: If there is no "{" or the braces never balance
    """
    start = text.find("{")
    if start == -1:
        msg = "No JSON object found in provider response"
        raise MalformedResponseError(
            msg, error_code=ErrorCode.PAR_NO_JSON_OBJECT.value
        )

    depth = 0
    in_string = False
    escape_next = False

    for i in range(start, len(text)):
        char = text[i]

        if escape_next:
            escape_next = False
            continue

        if in_string:
            if char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    msg = "Unbalanced braces in provider response"
    raise MalformedResponseError(
        msg,
        error_code=ErrorCode.PAR_NO_JSON_OBJECT.value,
        context={"open_braces": depth, "in_string": in_string},
    )


def _card_text(item: Any) -> str | None:
    if isinstance(item, str):
        text = item
    elif isinstance(item, dict):
        value = item.get("text", item.get("content"))
        if not isinstance(value, str):
            return None
        text = value
    else:
        return None
    text = text.strip()
    return text or None


def _option(item: Any) -> SubTopicOption | None:
    if not isinstance(item, dict):
        return None
    title = item.get("title")
    description = item.get("description", "")
    if not isinstance(title, str) or not title.strip():
        return None
    if not isinstance(description, str):
        description = ""
    return SubTopicOption(title=title.strip(), description=description.strip())


class ResponseParser:
    """Decodes provider text into cards and sub-topic options.

    Accepts the current {"cards": [{"text": ...}]} shape and the legacy
    {"snippets": ["..."]} shape.
    """

    def __init__(self, max_options: int = MAX_OPTIONS):
        self.max_options = max_options

    def parse(self, raw: str, count: int | None = None) -> ParsedResponse:
        """Parse raw provider text.

        Args:
            raw: Raw completion text
            count: Maximum number of cards to keep (no limit if None)

        Returns:
            ParsedResponse; cards may be empty for a well-formed empty list

        Raises:
            MalformedResponseError: For any input that cannot be decoded
        """
        if not isinstance(raw, str):
            msg = f"Provider response must be text, got {type(raw).__name__}"
            raise MalformedResponseError(
                msg, error_code=ErrorCode.PAR_INVALID_JSON.value
            )

        span = extract_json_object(raw)
        try:
            data = json.loads(span)
        except (ValueError, RecursionError) as e:
            logger.debug(
                "response_json_decode_failed",
                error=str(e),
                span_preview=span[:200],
            )
            msg = f"Extracted JSON is invalid: {e}"
            raise MalformedResponseError(
                msg, error_code=ErrorCode.PAR_INVALID_JSON.value
            ) from e

        # extract_json_object guarantees a "{...}" span, so data is a dict here
        if "cards" in data:
            raw_cards = data["cards"]
        elif "snippets" in data:
            raw_cards = data["snippets"]
        else:
            msg = "Response has neither 'cards' nor 'snippets'"
            raise MalformedResponseError(
                msg,
                error_code=ErrorCode.PAR_UNEXPECTED_SHAPE.value,
                context={"keys": sorted(str(k) for k in data)[:10]},
            )

        if not isinstance(raw_cards, list):
            msg = "Card collection is not a list"
            raise MalformedResponseError(
                msg, error_code=ErrorCode.PAR_UNEXPECTED_SHAPE.value
            )

        cards = [text for text in (_card_text(item) for item in raw_cards) if text]
        if count is not None:
            cards = cards[: max(count, 0)]

        options: list[SubTopicOption] = []
        raw_options = data.get("options")
        if isinstance(raw_options, list):
            for item in raw_options:
                option = _option(item)
                if option is not None:
                    options.append(option)
                if len(options) >= self.max_options:
                    break

        return ParsedResponse(cards=cards, options=options)
