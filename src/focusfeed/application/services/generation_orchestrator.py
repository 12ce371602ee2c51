"""Application service turning a topic request into a page of unique snippets."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any

from ...domain.entities import (
    GeneratedBatch,
    GenerationRequest,
    GenerationResult,
    SubTopicOption,
)
from ...domain.interfaces.generation_cache import IGenerationCache
from ...domain.interfaces.text_provider import ITextProvider
from ...domain.services import ContinuationCursor, CursorService, FingerprintService
from ...error_codes import ErrorCode
from ...exceptions import BadRequestError, MalformedResponseError, ProviderError
from ...prompts import build_snippet_prompt
from ...utils.logging import get_logger
from .dedup_tracker import DedupTracker
from .fallback_library import FallbackLibrary
from .response_parser import ResponseParser
from .topic_popularity import TopicPopularityTracker

logger = get_logger(__name__)


@dataclass
class GenerationOrchestratorConfig:
    """Request limits and recovery policy for the orchestrator."""

    max_count: int = 10
    max_topic_length: int = 200
    max_topup_attempts: int = 5
    max_options: int = 4
    provider_timeout: float | None = None
    cache_ttl: float | None = None


class GenerationOrchestrator:
    """Runs one request through cache, provider, dedup and fallback.

    Only BadRequestError ever leaves generate(). Provider failures and
    unparseable output are replaced by fallback content, and a batch that
    dedup empties is topped up from the fallback library, so a valid request
    always gets a page.
    """

    def __init__(
        self,
        provider: ITextProvider,
        cache: IGenerationCache,
        dedup_tracker: DedupTracker,
        parser: ResponseParser | None = None,
        fallback: FallbackLibrary | None = None,
        popularity: TopicPopularityTracker | None = None,
        config: GenerationOrchestratorConfig | None = None,
    ):
        """Initialize orchestrator with dependencies.

        Args:
            provider: Upstream text provider
            cache: Shared generation cache
            dedup_tracker: Per-viewer duplicate filter
            parser: Provider output parser
            fallback: Templated content source
            popularity: Optional topic counters updated on first-page requests
            config: Limits and recovery policy
        """
        self.config = config or GenerationOrchestratorConfig()
        self.provider = provider
        self.cache = cache
        self.dedup_tracker = dedup_tracker
        self.parser = parser or ResponseParser(max_options=self.config.max_options)
        self.fallback = fallback or FallbackLibrary(max_options=self.config.max_options)
        self.popularity = popularity

        logger.info(
            "generation_orchestrator_initialized",
            provider=provider.get_provider_name(),
            max_topup_attempts=self.config.max_topup_attempts,
        )

    def _validate(self, request: GenerationRequest) -> ContinuationCursor:
        topic = request.topic.strip() if isinstance(request.topic, str) else ""
        if not topic:
            msg = "Topic must not be empty"
            raise BadRequestError(msg, error_code=ErrorCode.REQ_TOPIC_INVALID.value)
        if len(topic) > self.config.max_topic_length:
            msg = f"Topic must be at most {self.config.max_topic_length} characters"
            raise BadRequestError(
                msg,
                error_code=ErrorCode.REQ_TOPIC_INVALID.value,
                context={"length": len(topic)},
            )

        count = request.count
        if (
            not isinstance(count, int)
            or isinstance(count, bool)
            or not 1 <= count <= self.config.max_count
        ):
            msg = f"Count must be between 1 and {self.config.max_count}"
            raise BadRequestError(
                msg,
                error_code=ErrorCode.REQ_COUNT_INVALID.value,
                context={"count": count},
            )

        if not request.viewer_key:
            msg = "A viewer key is required"
            raise BadRequestError(msg, error_code=ErrorCode.REQ_VIEWER_MISSING.value)

        return CursorService.decode(request.cursor)

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate one page of snippets for a viewer.

        Args:
            request: Topic, count, viewer and continuation cursor

        Returns:
            Page of exactly ``count`` unique snippets in all but pathological
            cases, with options when requested and the cursor for the next page

        Raises:
            BadRequestError: If the request is invalid (no upstream call is made)
        """
        start_time = time.perf_counter()
        try:
            cursor = self._validate(request)
        except BadRequestError as e:
            logger.info(
                "generation_request_rejected",
                error_code=e.error_code,
                reason=e.message,
            )
            raise

        display_topic = FingerprintService.display_topic(request.topic)
        normalized_topic = FingerprintService.normalize(request.topic)
        count = request.count
        viewer_key = request.viewer_key
        log_context: dict[str, Any] = {
            "topic": display_topic,
            "viewer": FingerprintService.hash_viewer_key(viewer_key),
            "page": cursor.page,
        }

        if self.popularity is not None and not request.cursor:
            self.popularity.track_selection(viewer_key, display_topic)

        cache_key = FingerprintService.cache_key(
            normalized_topic,
            count,
            CursorService.encode(cursor) if request.cursor else None,
            request.generate_options,
        )

        generated = False

        def _generate() -> GeneratedBatch:
            nonlocal generated
            generated = True
            return self._generate_batch(
                display_topic, count, request.generate_options, cursor, log_context
            )

        used_fallback = False
        cache_hit = False
        try:
            batch = self.cache.get_or_generate(
                cache_key, _generate, ttl=self.config.cache_ttl
            )
            candidates = list(batch.cards)
            options = list(batch.options)
            cache_hit = not generated
        except (ProviderError, MalformedResponseError) as e:
            logger.warning(
                "generation_fallback_used",
                failure_kind=e.failure_kind,
                error_code=e.error_code or ErrorCode.PRV_FALLBACK_USED.value,
                error=e.message,
                **log_context,
            )
            candidates, options = self._fallback_page(
                display_topic, count, request.generate_options, cursor
            )
            used_fallback = True
        except Exception as e:
            logger.exception(
                "generation_unexpected_error",
                failure_kind="unexpected_error",
                error_code=ErrorCode.PRV_FALLBACK_USED.value,
                error_type=type(e).__name__,
                **log_context,
            )
            candidates, options = self._fallback_page(
                display_topic, count, request.generate_options, cursor
            )
            used_fallback = True

        if request.generate_options and not options:
            options = self.fallback.options_for(display_topic)

        filtered = self.dedup_tracker.filter(viewer_key, candidates)
        if filtered.all_duplicates:
            logger.warning(
                "generation_all_duplicates",
                error_code=ErrorCode.DUP_ALL_DUPLICATES.value,
                candidates=len(candidates),
                used_fallback=used_fallback,
                **log_context,
            )
        accepted = filtered.unique[:count]

        if len(accepted) < count:
            topped_up = self._top_up(
                viewer_key, display_topic, count, cursor, accepted, log_context
            )
            if topped_up:
                used_fallback = True
                accepted.extend(topped_up)

        self.dedup_tracker.record(viewer_key, accepted)

        last_snippet = accepted[-1] if accepted else cursor.last_snippet
        next_cursor = CursorService.encode(cursor.next(last_snippet))

        logger.info(
            "generation_completed",
            snippets=len(accepted),
            requested=count,
            options=len(options),
            cache_hit=cache_hit,
            used_fallback=used_fallback,
            duration=round(time.perf_counter() - start_time, 3),
            **log_context,
        )

        return GenerationResult(
            snippets=accepted,
            next_cursor=next_cursor,
            options=options[: self.config.max_options],
            used_fallback=used_fallback,
            cache_hit=cache_hit,
        )

    async def generate_async(self, request: GenerationRequest) -> GenerationResult:
        """Run generate() in a worker thread.

        Cancelling the awaiting task abandons only this caller's result; the
        worker, and any cache population it leads, runs to completion.
        """
        return await asyncio.to_thread(self.generate, request)

    def _generate_batch(
        self,
        topic: str,
        count: int,
        generate_options: bool,
        cursor: ContinuationCursor,
        log_context: dict[str, Any],
    ) -> GeneratedBatch:
        """Call the provider and parse its output. Errors propagate uncached."""
        prompt = build_snippet_prompt(
            topic,
            count,
            generate_options=generate_options,
            page=cursor.page,
            last_snippet=cursor.last_snippet,
            max_options=self.config.max_options,
        )
        raw = self.provider.complete(
            prompt, timeout=self.config.provider_timeout, **log_context
        )
        parsed = self.parser.parse(raw, count=count)

        if not parsed.cards:
            logger.warning("generation_empty_batch", **log_context)

        return GeneratedBatch(
            cards=tuple(parsed.cards),
            options=tuple(parsed.options) if generate_options else (),
        )

    def _fallback_page(
        self,
        topic: str,
        count: int,
        generate_options: bool,
        cursor: ContinuationCursor,
    ) -> tuple[list[str], list[SubTopicOption]]:
        # Salted by position so later fallback pages differ from the first.
        salt = f"page:{cursor.page}" if cursor.page else ""
        content = self.fallback.generate(topic, count, generate_options, salt=salt)
        return content.cards, content.options

    def _top_up(
        self,
        viewer_key: str,
        topic: str,
        count: int,
        cursor: ContinuationCursor,
        accepted: list[str],
        log_context: dict[str, Any],
    ) -> list[str]:
        """Draw fallback snippets until the page is full or attempts run out."""
        extra: list[str] = []
        seen_count = self.dedup_tracker.seen_count(viewer_key)
        attempts = 0

        while len(accepted) + len(extra) < count:
            if attempts >= self.config.max_topup_attempts:
                logger.warning(
                    "generation_topup_exhausted",
                    error_code=ErrorCode.DUP_TOPUP_EXHAUSTED.value,
                    attempts=attempts,
                    shortfall=count - len(accepted) - len(extra),
                    **log_context,
                )
                break
            attempts += 1
            salt = f"topup:{cursor.page}:{attempts}:{seen_count}"
            content = self.fallback.generate(
                topic, count - len(accepted) - len(extra), False, salt=salt
            )
            result = self.dedup_tracker.filter(
                viewer_key, content.cards, exclude=[*accepted, *extra]
            )
            extra.extend(result.unique)

        if extra:
            logger.debug(
                "generation_topped_up", added=len(extra), attempts=attempts, **log_context
            )
        return extra[: count - len(accepted)]
