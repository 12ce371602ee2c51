"""Tests for topic popularity counters."""

from focusfeed.application.services.topic_popularity import (
    DEFAULT_POPULAR_TOPICS,
    TopicPopularityTracker,
)


def test_defaults_for_new_user():
    tracker = TopicPopularityTracker()
    assert tracker.popular_topics("nobody") == list(DEFAULT_POPULAR_TOPICS)
    assert tracker.popular_topics("nobody", limit=3) == list(DEFAULT_POPULAR_TOPICS[:3])


def test_ordering_liked_then_count_then_recency():
    tracker = TopicPopularityTracker()
    tracker.track_selection("u", "Chess")
    tracker.track_selection("u", "Chess")
    tracker.track_selection("u", "Go")
    tracker.track_selection("u", "Poker")
    tracker.track_selection("u", "Origami")
    tracker.track_like("u", "Origami", True)

    assert tracker.popular_topics("u") == ["Origami", "Chess", "Poker", "Go"]


def test_unlike():
    tracker = TopicPopularityTracker()
    tracker.track_selection("u", "Chess")
    tracker.track_selection("u", "Chess")
    tracker.track_selection("u", "Go")
    tracker.track_like("u", "Go", True)
    tracker.track_like("u", "Go", False)

    assert tracker.popular_topics("u") == ["Chess", "Go"]


def test_topics_grouped_by_display_form():
    tracker = TopicPopularityTracker()
    tracker.track_selection("u", " Dark   Matter ")
    tracker.track_selection("u", "Dark Matter")
    assert tracker.popular_topics("u") == ["Dark Matter"]


def test_global_popular_topics():
    tracker = TopicPopularityTracker()
    for user in ("a", "b", "c"):
        tracker.track_selection(user, "Chess")
    tracker.track_selection("a", "Go")
    tracker.track_selection("b", "Go")
    tracker.track_selection("c", "Poker")

    assert tracker.global_popular_topics() == [("Chess", 3), ("Go", 2), ("Poker", 1)]
    assert tracker.global_popular_topics(limit=1) == [("Chess", 3)]


def test_blank_input_is_ignored():
    tracker = TopicPopularityTracker()
    tracker.track_selection("", "Chess")
    tracker.track_selection("u", "   ")
    assert tracker.global_popular_topics() == []
