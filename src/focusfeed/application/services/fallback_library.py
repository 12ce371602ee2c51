"""Deterministic templated content used when the provider cannot be used."""

from __future__ import annotations

from dataclasses import dataclass, field

from focusfeed.domain.entities import SubTopicOption
from focusfeed.domain.services import FingerprintService

SNIPPET_TEMPLATES: tuple[str, ...] = (
    "{topic}: Learn the core idea and why it matters.",
    "Key insight: {topic} becomes more powerful when understood conceptually, not memorized.",
    "Practical tip: Apply {topic} in small, real examples.",
    "Remember: Consistency beats intensity when learning {topic}.",
    "Expert advice: Focus on fundamentals before advanced {topic} concepts.",
    "Quick check: Try explaining {topic} to a friend in one sentence.",
    "Connect the dots: Relate {topic} to something you already know well.",
    "Go deeper: Notice which part of {topic} surprises you and follow it.",
)


@dataclass(frozen=True)
class OptionRule:
    """Sub-topic suggestions offered when any keyword appears in the topic."""

    keywords: frozenset[str]
    options: tuple[tuple[str, str], ...]

    def matches(self, normalized_topic: str) -> bool:
        if not self.keywords:
            return True
        words = set(normalized_topic.split())
        return any(
            keyword in words if " " not in keyword else keyword in normalized_topic
            for keyword in self.keywords
        )


# First match wins; the keyword-less default rule must stay last.
OPTION_RULES: tuple[OptionRule, ...] = (
    OptionRule(
        keywords=frozenset({"physics", "quantum", "relativity", "dilation", "gravity", "particle"}),
        options=(
            ("Core Principles of {topic}", "The laws everything else in {topic} builds on"),
            ("Experiments in {topic}", "Landmark experiments that shaped {topic}"),
            ("The Math Behind {topic}", "Equations that make {topic} precise"),
            ("Open Problems in {topic}", "Questions physicists are still working on"),
        ),
    ),
    OptionRule(
        keywords=frozenset({"science", "biology", "chemistry", "genetic", "neuroplasticity", "matter"}),
        options=(
            ("Scientific Method in {topic}", "How researchers test ideas about {topic}"),
            ("Key Discoveries in {topic}", "Breakthroughs that changed the field"),
            ("{topic} in Everyday Life", "Where you meet {topic} without noticing"),
            ("Frontiers of {topic}", "What current research is exploring"),
        ),
    ),
    OptionRule(
        keywords=frozenset({"ai", "artificial intelligence", "machine learning", "neural", "llm"}),
        options=(
            ("How {topic} Works", "Models, data and training behind {topic}"),
            ("Ethics of {topic}", "Fairness, safety and accountability questions"),
            ("{topic} in Practice", "Real products and systems using {topic}"),
            ("Future of {topic}", "Where {topic} is heading next"),
        ),
    ),
    OptionRule(
        keywords=frozenset(),
        options=(
            ("Fundamentals of {topic}", "Core concepts and principles"),
            ("History of {topic}", "How {topic} developed over time"),
            ("Applications of {topic}", "Where {topic} is used in practice"),
            ("Common Misconceptions about {topic}", "What people often get wrong"),
        ),
    ),
)


@dataclass(frozen=True)
class FallbackContent:
    """Templated cards and options for one request."""

    cards: list[str] = field(default_factory=list)
    options: list[SubTopicOption] = field(default_factory=list)


class FallbackLibrary:
    """Produces templated snippets that reference the topic verbatim.

    Output is a pure function of (topic, count, want_options, salt). An empty
    salt yields the plain templates; any other salt shifts the template
    rotation and tags every sentence with a short id so that later pages and
    top-ups do not collide with earlier fallback output.
    """

    def __init__(
        self,
        templates: tuple[str, ...] = SNIPPET_TEMPLATES,
        rules: tuple[OptionRule, ...] = OPTION_RULES,
        max_options: int = 4,
    ):
        if not templates:
            msg = "FallbackLibrary requires at least one template"
            raise ValueError(msg)
        self.templates = templates
        self.rules = rules
        self.max_options = max_options

    def generate(
        self, topic: str, count: int, want_options: bool, salt: str = ""
    ) -> FallbackContent:
        display = FingerprintService.display_topic(topic)
        normalized = FingerprintService.normalize(topic)

        offset = 0
        if salt:
            offset = int(FingerprintService.short_id(normalized, salt, length=8), 16)

        cards = []
        for index in range(max(count, 0)):
            template = self.templates[(offset + index) % len(self.templates)]
            sentence = template.format(topic=display)
            # Wrapped indices repeat a template, so they are tagged even unsalted.
            if salt or index >= len(self.templates):
                tag = FingerprintService.short_id(normalized, salt, str(index))
                sentence = f"{sentence} (#{tag})"
            cards.append(sentence)

        options = self.options_for(display) if want_options else []
        return FallbackContent(cards=cards, options=options)

    def options_for(self, topic: str) -> list[SubTopicOption]:
        """Sub-topic options from the first rule matching the topic."""
        display = FingerprintService.display_topic(topic)
        normalized = FingerprintService.normalize(topic)
        for rule in self.rules:
            if rule.matches(normalized):
                return [
                    SubTopicOption(
                        title=title.format(topic=display),
                        description=description.format(topic=display),
                    )
                    for title, description in rule.options[: self.max_options]
                ]
        return []
