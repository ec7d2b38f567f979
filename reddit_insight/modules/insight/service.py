from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, TypeVar

from pydantic import ValidationError as PydanticValidationError

from reddit_insight.config import CardinalityCaps, ResearchConfig
from reddit_insight.core.contracts import ResearchBackend
from reddit_insight.core.errors import MalformedResponse, ValidationError
from reddit_insight.core.utils import extract_json
from reddit_insight.modules.insight.cache import AnalysisCache
from reddit_insight.modules.insight.prompt_builder import (
    build_grounding_prompt,
    build_synthesis_prompt,
)
from reddit_insight.modules.insight.schemas import AnalysisResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _epoch_millis() -> int:
    return int(time.time() * 1000)


class InsightService:
    """Cache-first two-stage analysis of a market-research query.

    A run goes cache check -> grounding -> synthesis -> extraction ->
    finalize. Nothing is retried and nothing partial is returned: any upstream
    or extraction failure aborts the run and leaves the cache untouched.
    Concurrent runs for the same query are not coalesced; the last one to
    finish owns the cache entry.
    """

    def __init__(
        self,
        backend: ResearchBackend,
        model: str,
        cache: AnalysisCache,
        research: Optional[ResearchConfig] = None,
        caps: Optional[CardinalityCaps] = None,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self.backend = backend
        self.model = model
        self.cache = cache
        self.research = research or ResearchConfig()
        self.caps = caps or CardinalityCaps()
        self.clock = clock

    async def analyze(self, query: str, force_refresh: bool = False) -> AnalysisResult:
        if not (query or "").strip():
            raise ValidationError("Query must not be empty")

        if not force_refresh:
            cached = self.cache.get(query)
            if cached is not None:
                return cached

        grounding = await self.backend.complete_grounded(
            build_grounding_prompt(query, self.research), self.model
        )
        raw_text = await self.backend.complete_json(
            build_synthesis_prompt(
                query=query,
                search_context=grounding.text,
                research=self.research,
                caps=self.caps,
            ),
            self.model,
        )
        result = self._parse_result(raw_text)
        result = self.finalize(result)
        self.cache.put(query, result)
        return result

    def finalize(self, result: AnalysisResult) -> AnalysisResult:
        """Enforce the caps, fill the flat pain-point list, stamp freshness."""
        result = self.apply_caps(result)
        updates = {
            "meta": result.meta.model_copy(update={"last_updated": self.clock()})
        }
        if not result.pain_points:
            updates["pain_points"] = [
                point for topic in result.topics for point in (topic.pain_points or [])
            ]
        return result.model_copy(update=updates)

    def apply_caps(self, result: AnalysisResult) -> AnalysisResult:
        caps = self.caps
        topics = [
            topic.model_copy(
                update={
                    "pain_points": self._cap(
                        topic.pain_points, caps.pain_points_per_topic, "topic.painPoints"
                    ),
                    "top_posts": self._cap(
                        topic.top_posts, caps.posts_per_topic, "topic.topPosts"
                    ),
                }
            )
            for topic in self._cap(result.topics, caps.topics, "topics")
        ]
        brands = [
            brand.model_copy(
                update={
                    "example_posts": self._cap(
                        brand.example_posts, caps.posts_per_brand, "brand.examplePosts"
                    )
                }
            )
            for brand in self._cap(result.brands, caps.brands, "brands")
        ]
        return result.model_copy(
            update={
                "topics": topics,
                "subreddits": self._cap(result.subreddits, caps.subreddits, "subreddits"),
                "brands": brands,
            }
        )

    @staticmethod
    def _cap(items: Optional[List[T]], limit: int, label: str) -> Optional[List[T]]:
        if items is None or len(items) <= limit:
            return items
        logger.warning("Dropping %d %s beyond cap %d", len(items) - limit, label, limit)
        return list(items[:limit])

    @staticmethod
    def _parse_result(raw_text: str) -> AnalysisResult:
        document = extract_json(raw_text)
        if not isinstance(document, dict):
            raise MalformedResponse(
                "Analysis response is not a JSON object", raw_text=raw_text
            )
        if not document.get("metrics"):
            raise MalformedResponse(
                "Analysis response has no metrics", raw_text=raw_text
            )
        try:
            return AnalysisResult.model_validate(document)
        except PydanticValidationError as exc:
            raise MalformedResponse(
                f"Analysis response does not match the expected shape: {exc}",
                raw_text=raw_text,
            ) from exc
