"""Tests for the snippet generation prompt."""

from focusfeed.prompts import build_snippet_prompt


def test_first_page_prompt():
    prompt = build_snippet_prompt("Photography tips", 5)

    assert 'Create exactly 5 learning snippets about: "Photography tips"' in prompt
    assert '"cards"' in prompt
    assert "options" not in prompt
    assert "different from" not in prompt


def test_continuation_mentions_last_snippet():
    prompt = build_snippet_prompt(
        "Chess", 3, page=2, last_snippet='Knights move in an "L" {shape}.'
    )

    assert "page 2" in prompt
    assert 'different from the previous one: "Knights move in an "L" {shape}."' in prompt


def test_options_requested():
    prompt = build_snippet_prompt("Chess", 3, generate_options=True, max_options=4)

    assert "suggest 4 related sub-topics" in prompt
    assert '"options"' in prompt
