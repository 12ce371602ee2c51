"""In-memory topic popularity counters."""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass

from focusfeed.domain.services import FingerprintService
from focusfeed.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_POPULAR_TOPICS: tuple[str, ...] = (
    "Quantum Computing",
    "Neuroplasticity",
    "Dark Matter",
    "Biohacking",
    "Blockchain",
    "AI Ethics",
    "Space Colonization",
    "Cryptography",
    "Genetic Engineering",
    "Renewable Energy",
    "Consciousness",
    "Time Dilation",
)


@dataclass
class TopicInteraction:
    """One user's history with one topic."""

    topic: str
    count: int = 0
    is_liked: bool = False
    last_interaction: int = 0


class TopicPopularityTracker:
    """Counts topic selections and likes per user.

    Recency is an ever-increasing sequence number rather than wall-clock
    time so that ordering is stable even for interactions in the same tick.
    Topics are grouped by their display form (trimmed, whitespace collapsed).
    """

    def __init__(self, default_topics: tuple[str, ...] = DEFAULT_POPULAR_TOPICS):
        self.default_topics = default_topics
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._interactions: dict[str, dict[str, TopicInteraction]] = {}

    def _interaction(self, user_id: str, topic: str) -> TopicInteraction:
        display = FingerprintService.display_topic(topic)
        user = self._interactions.setdefault(user_id, {})
        interaction = user.get(display)
        if interaction is None:
            interaction = TopicInteraction(topic=display)
            user[display] = interaction
        return interaction

    def track_selection(self, user_id: str, topic: str) -> None:
        if not user_id or not topic.strip():
            return
        with self._lock:
            interaction = self._interaction(user_id, topic)
            interaction.count += 1
            interaction.last_interaction = next(self._sequence)
        logger.debug("topic_selection_tracked", topic=interaction.topic)

    def track_like(self, user_id: str, topic: str, is_liked: bool = True) -> None:
        if not user_id or not topic.strip():
            return
        with self._lock:
            interaction = self._interaction(user_id, topic)
            interaction.is_liked = is_liked
            interaction.last_interaction = next(self._sequence)

    def popular_topics(self, user_id: str, limit: int = 12) -> list[str]:
        """Topics for a user, liked first, then by count, then most recent.

        Users without interactions get the default topic list.
        """
        with self._lock:
            interactions = list(self._interactions.get(user_id, {}).values())

        if not interactions:
            return list(self.default_topics[:limit])

        interactions.sort(
            key=lambda i: (i.is_liked, i.count, i.last_interaction), reverse=True
        )
        return [i.topic for i in interactions[:limit]]

    def global_popular_topics(self, limit: int = 20) -> list[tuple[str, int]]:
        """(topic, total selections) across all users, most popular first."""
        totals: dict[str, int] = {}
        with self._lock:
            for user in self._interactions.values():
                for interaction in user.values():
                    totals[interaction.topic] = (
                        totals.get(interaction.topic, 0) + interaction.count
                    )

        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        return ranked[:limit]
