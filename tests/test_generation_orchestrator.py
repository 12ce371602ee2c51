"""Tests for the generation orchestrator."""

import asyncio
import threading

import pytest

from focusfeed.application.services.dedup_tracker import FilterResult
from focusfeed.application.services.generation_orchestrator import (
    GenerationOrchestrator,
    GenerationOrchestratorConfig,
)
from focusfeed.application.services.topic_popularity import TopicPopularityTracker
from focusfeed.domain.entities import GenerationRequest, SubTopicOption
from focusfeed.domain.services import CursorService, FingerprintService
from focusfeed.error_codes import ErrorCode
from focusfeed.exceptions import (
    BadRequestError,
    ProviderTimeoutError,
    RateLimitedError,
)
from tests.fixtures import cards_json

PHOTO_CARDS = [
    "Use the rule of thirds to balance a frame.",
    "Shoot during golden hour for soft, warm light.",
    "A faster shutter speed freezes motion.",
    "Lower ISO values keep images cleaner.",
    "Lead the eye with natural lines in the scene.",
]


def _request(topic="Photography tips", viewer="viewer-1", **kwargs):
    return GenerationRequest(topic=topic, viewer_key=viewer, **kwargs)


def _normalized(snippets):
    return [FingerprintService.normalize(s) for s in snippets]


class TestScenarios:
    def test_valid_provider_output(self, orchestrator, mock_provider):
        mock_provider.queue(cards_json(*PHOTO_CARDS))

        result = orchestrator.generate(_request(count=5))

        assert result.snippets == PHOTO_CARDS
        assert result.next_cursor
        assert result.used_fallback is False
        assert result.cache_hit is False
        assert mock_provider.call_count == 1

    def test_provider_timeout_uses_fallback(self, orchestrator, mock_provider):
        mock_provider.queue(ProviderTimeoutError("took too long"))

        result = orchestrator.generate(_request(count=5))

        assert len(result.snippets) == 5
        assert len(set(result.snippets)) == 5
        assert all("Photography tips" in s for s in result.snippets)
        assert result.used_fallback is True

    def test_all_duplicates_triggers_full_top_up(
        self, orchestrator, mock_provider, dedup_tracker
    ):
        dedup_tracker.record("viewer-1", ["A"])
        mock_provider.queue('{"cards":[{"text":"A"},{"text":"A"}]}')

        result = orchestrator.generate(_request(count=5))

        assert len(result.snippets) == 5
        assert len(set(_normalized(result.snippets))) == 5
        assert "a" not in _normalized(result.snippets)
        assert result.used_fallback is True

    def test_concurrent_viewers_share_one_upstream_call(
        self, orchestrator, mock_provider, generation_cache, dedup_store
    ):
        mock_provider.default_response = cards_json(
            "Bias can enter models through data.",
            "Transparency helps people contest decisions.",
            "Accountability needs a named owner.",
            "Privacy is part of fairness.",
            "Safety testing continues after launch.",
        )
        mock_provider.gate = threading.Event()
        results = {}

        def run(viewer):
            results[viewer] = orchestrator.generate(
                _request(topic="AI Ethics", viewer=viewer, count=5)
            )

        alice = threading.Thread(target=run, args=("alice",))
        bob = threading.Thread(target=run, args=("bob",))
        alice.start()
        assert mock_provider.started.wait(timeout=5.0)
        bob.start()

        waited = threading.Event()
        while generation_cache.get_stats()["coalesced"] < 1 and not waited.wait(0.01):
            pass
        mock_provider.gate.set()
        alice.join(timeout=5.0)
        bob.join(timeout=5.0)

        assert mock_provider.call_count == 1
        assert results["alice"].snippets == results["bob"].snippets
        assert len(results["alice"].snippets) == 5
        for viewer in ("alice", "bob"):
            assert dedup_store.snapshot(viewer) == frozenset(
                _normalized(results[viewer].snippets)
            )


class TestPaging:
    def test_next_cursor_round_trip(self, orchestrator, mock_provider):
        mock_provider.queue(cards_json(*PHOTO_CARDS))
        first = orchestrator.generate(_request(count=5))

        cursor = CursorService.decode(first.next_cursor)
        assert cursor.page == 1
        assert cursor.last_snippet == PHOTO_CARDS[-1]

        mock_provider.queue(cards_json("Clean your lens before every shoot."))
        second = orchestrator.generate(_request(count=1, cursor=first.next_cursor))

        assert second.snippets == ["Clean your lens before every shoot."]
        assert CursorService.decode(second.next_cursor).page == 2
        assert PHOTO_CARDS[-1] in mock_provider.call_history[-1]["prompt"]

    @pytest.mark.parametrize("long_card", ["a" * 5000, "\U0001F4F7" * 800])
    def test_cursor_from_long_snippet_is_accepted(
        self, orchestrator, mock_provider, long_card
    ):
        mock_provider.queue(cards_json(long_card))
        first = orchestrator.generate(_request(count=1))
        assert first.snippets == [long_card]

        mock_provider.queue(cards_json("Clean your lens before every shoot."))
        second = orchestrator.generate(_request(count=1, cursor=first.next_cursor))

        assert second.snippets == ["Clean your lens before every shoot."]
        assert second.used_fallback is False
        assert CursorService.decode(second.next_cursor).page == 2

    def test_no_repeats_across_pages(self, orchestrator, mock_provider):
        # The provider keeps returning the same facts on every page
        mock_provider.default_response = cards_json(*PHOTO_CARDS)
        seen = []
        cursor = None

        for _ in range(6):
            result = orchestrator.generate(_request(count=5, cursor=cursor))
            assert len(result.snippets) == 5
            seen.extend(_normalized(result.snippets))
            cursor = result.next_cursor

        assert len(seen) == len(set(seen))

    def test_repeated_fallback_pages_stay_distinct(self, orchestrator, mock_provider):
        mock_provider.default_response = RateLimitedError("slow down", retry_after=30)
        seen = []
        cursor = None

        for _ in range(4):
            result = orchestrator.generate(_request(count=5, cursor=cursor))
            assert len(result.snippets) == 5
            seen.extend(_normalized(result.snippets))
            cursor = result.next_cursor

        assert len(seen) == len(set(seen))


class TestRecovery:
    def test_malformed_output_falls_back(self, orchestrator, mock_provider):
        mock_provider.queue("Sorry, I cannot help with that.")

        result = orchestrator.generate(_request(count=3))

        assert len(result.snippets) == 3
        assert result.used_fallback is True

    def test_failures_are_not_cached(self, orchestrator, mock_provider):
        mock_provider.queue(ProviderTimeoutError("timeout"), cards_json(*PHOTO_CARDS))

        first = orchestrator.generate(_request(count=5, viewer="v1"))
        second = orchestrator.generate(_request(count=5, viewer="v2"))

        assert first.used_fallback is True
        assert second.snippets == PHOTO_CARDS
        assert mock_provider.call_count == 2

    def test_second_viewer_gets_cache_hit(self, orchestrator, mock_provider):
        mock_provider.queue(cards_json(*PHOTO_CARDS))

        orchestrator.generate(_request(count=5, viewer="v1"))
        result = orchestrator.generate(_request(count=5, viewer="v2"))

        assert result.cache_hit is True
        assert result.snippets == PHOTO_CARDS
        assert mock_provider.call_count == 1

    def test_unexpected_error_falls_back(self, orchestrator, mock_provider):
        mock_provider.queue(RuntimeError("bug in adapter"))

        result = orchestrator.generate(_request(count=2))

        assert len(result.snippets) == 2
        assert result.used_fallback is True

    def test_short_provider_batch_is_topped_up(self, orchestrator, mock_provider):
        mock_provider.queue(cards_json(*PHOTO_CARDS[:2]))

        result = orchestrator.generate(_request(count=5))

        assert result.snippets[:2] == PHOTO_CARDS[:2]
        assert len(result.snippets) == 5
        assert result.used_fallback is True

    def test_top_up_attempts_are_bounded(self, mock_provider, generation_cache):
        class SaturatedTracker:
            """Rejects everything, as if the viewer had seen all content."""

            def filter(self, viewer_key, candidates, exclude=()):
                return FilterResult(unique=[], duplicate_count=len(candidates))

            def record(self, viewer_key, accepted):
                self.recorded = list(accepted)

            def seen_count(self, viewer_key):
                return 0

        tracker = SaturatedTracker()
        orchestrator = GenerationOrchestrator(
            provider=mock_provider,
            cache=generation_cache,
            dedup_tracker=tracker,
            config=GenerationOrchestratorConfig(max_topup_attempts=3),
        )

        result = orchestrator.generate(_request(count=5))

        assert result.snippets == []
        assert tracker.recorded == []
        assert result.next_cursor


class TestOptions:
    def test_provider_options_are_returned(self, orchestrator, mock_provider):
        mock_provider.queue(
            cards_json(
                *PHOTO_CARDS,
                options=[{"title": "Lighting", "description": "Work with light"}],
            )
        )

        result = orchestrator.generate(_request(count=5, generate_options=True))

        assert result.options == [SubTopicOption("Lighting", "Work with light")]
        assert "sub-topics" in mock_provider.call_history[0]["prompt"]

    def test_missing_options_are_filled_from_fallback(self, orchestrator, mock_provider):
        mock_provider.queue(cards_json(*PHOTO_CARDS))

        result = orchestrator.generate(_request(count=5, generate_options=True))

        assert len(result.options) == 4
        assert result.used_fallback is False

    def test_options_not_requested(self, orchestrator, mock_provider):
        mock_provider.queue(
            cards_json(*PHOTO_CARDS, options=[{"title": "x", "description": "y"}])
        )

        result = orchestrator.generate(_request(count=5))

        assert result.options == []


class TestValidation:
    @pytest.mark.parametrize(
        ("kwargs", "code"),
        [
            ({"topic": "   "}, ErrorCode.REQ_TOPIC_INVALID),
            ({"topic": "x" * 201}, ErrorCode.REQ_TOPIC_INVALID),
            ({"count": 0}, ErrorCode.REQ_COUNT_INVALID),
            ({"count": 11}, ErrorCode.REQ_COUNT_INVALID),
            ({"viewer": ""}, ErrorCode.REQ_VIEWER_MISSING),
            ({"cursor": "not a cursor!"}, ErrorCode.REQ_CURSOR_INVALID),
        ],
    )
    def test_invalid_requests_are_rejected(
        self, orchestrator, mock_provider, kwargs, code
    ):
        with pytest.raises(BadRequestError) as exc_info:
            orchestrator.generate(_request(**kwargs))

        assert exc_info.value.error_code == code.value
        assert mock_provider.call_count == 0

    def test_topic_at_max_length_is_accepted(self, orchestrator):
        result = orchestrator.generate(_request(topic="x" * 200, count=1))
        assert len(result.snippets) == 1


class TestIntegrations:
    def test_first_page_tracks_popularity(self, mock_provider, generation_cache, dedup_tracker):
        popularity = TopicPopularityTracker()
        orchestrator = GenerationOrchestrator(
            provider=mock_provider,
            cache=generation_cache,
            dedup_tracker=dedup_tracker,
            popularity=popularity,
        )

        first = orchestrator.generate(_request(topic="  Dark Matter ", count=2))
        orchestrator.generate(_request(topic="Dark Matter", count=2, cursor=first.next_cursor))

        assert popularity.popular_topics("viewer-1") == ["Dark Matter"]
        assert popularity.global_popular_topics() == [("Dark Matter", 1)]

    def test_generate_async(self, orchestrator, mock_provider):
        mock_provider.queue(cards_json(*PHOTO_CARDS))

        result = asyncio.run(orchestrator.generate_async(_request(count=5)))

        assert result.snippets == PHOTO_CARDS

    def test_provider_receives_timeout_and_log_context(self, orchestrator, mock_provider):
        orchestrator.generate(_request(topic="Chess", count=2))

        call = mock_provider.call_history[0]
        assert call["timeout"] == 1.0
        assert call["context"]["topic"] == "Chess"
        assert call["context"]["viewer"] == FingerprintService.hash_viewer_key("viewer-1")
