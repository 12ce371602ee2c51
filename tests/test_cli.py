"""Tests for the command-line interface."""

import httpx
import pytest
import respx
from typer.testing import CliRunner

from focusfeed.application.services.topic_popularity import DEFAULT_POPULAR_TOPICS
from focusfeed.cli import app
from focusfeed.utils.logging import configure_logging
from tests.fixtures import cards_json

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging():
    """Commands bind console logging to the runner's streams; rebind afterwards."""
    yield
    configure_logging("INFO")


GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-2.5-flash:generateContent"
)


def _gemini(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def test_providers_command():
    result = runner.invoke(app, ["providers"])
    assert result.exit_code == 0
    assert "openrouter" in result.stdout


def test_topics_command():
    result = runner.invoke(app, ["topics", "--limit", "3"])
    assert result.exit_code == 0
    for topic in DEFAULT_POPULAR_TOPICS[:3]:
        assert topic in result.stdout
    assert DEFAULT_POPULAR_TOPICS[3] not in result.stdout


def test_generate_without_api_key_fails_cleanly():
    result = runner.invoke(app, ["generate", "Chess"])
    assert result.exit_code == 1
    assert "Configuration error" in result.stdout


@respx.mock
def test_generate_follows_pages(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    route = respx.post(GEMINI_URL).mock(
        side_effect=[
            httpx.Response(200, json=_gemini(cards_json("Knights move in an L."))),
            httpx.Response(200, json=_gemini(cards_json("Castle early for safety."))),
        ]
    )

    result = runner.invoke(
        app, ["generate", "Chess", "--count", "1", "--pages", "2", "--viewer", "cli-test"]
    )

    assert result.exit_code == 0, result.stdout
    assert route.call_count == 2
    assert "Knights move in an L." in result.stdout
    assert "Castle early for safety." in result.stdout
    assert "next cursor" in result.stdout


@respx.mock
def test_generate_falls_back_when_provider_is_down(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    respx.post(GEMINI_URL).mock(return_value=httpx.Response(503))

    result = runner.invoke(app, ["generate", "Chess", "--count", "2", "--options"])

    assert result.exit_code == 0, result.stdout
    assert "(fallback)" in result.stdout
    assert "Explore further" in result.stdout


def test_generate_rejects_blank_topic(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    result = runner.invoke(app, ["generate", "   "])
    assert result.exit_code == 2
    assert "Invalid request" in result.stdout


def test_topics_for_user_ranks_liked_topics():
    result = runner.invoke(
        app, ["topics", "--user", "ana", "--liked", "Chess", "--liked", "Dark Matter"]
    )

    assert result.exit_code == 0, result.stdout
    assert "Topics for ana" in result.stdout
    assert "Chess" in result.stdout
    assert "Dark Matter" in result.stdout
    assert DEFAULT_POPULAR_TOPICS[0] not in result.stdout


def test_topics_for_new_user_falls_back_to_defaults():
    result = runner.invoke(app, ["topics", "--user", "ana", "--limit", "2"])

    assert result.exit_code == 0, result.stdout
    assert DEFAULT_POPULAR_TOPICS[0] in result.stdout
    assert DEFAULT_POPULAR_TOPICS[2] not in result.stdout


@respx.mock
def test_generate_like_ranks_topic_for_viewer(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    respx.post(GEMINI_URL).mock(
        return_value=httpx.Response(200, json=_gemini(cards_json("Knights move in an L.")))
    )

    result = runner.invoke(
        app, ["generate", "Chess", "--count", "1", "--viewer", "ana", "--like"]
    )

    assert result.exit_code == 0, result.stdout
    assert "Your topics: Chess" in result.stdout
