from __future__ import annotations

from typing import Iterable, List

from reddit_insight.core.contracts import ResearchBackend
from reddit_insight.core.errors import ValidationError
from reddit_insight.core.types import Citation
from reddit_insight.modules.search.schemas import SearchResult, SearchSource


def build_search_prompt(question: str) -> str:
    return (
        f'Answer this user question based on Reddit discussions: "{question}".\n'
        "Provide a concise summary answer in Simplified Chinese and a list of "
        "relevant sources found during search."
    )


def collect_sources(citations: Iterable[Citation], limit: int = 5) -> List[SearchSource]:
    """Turn citation records into unique sources; first URL occurrence wins."""
    sources: List[SearchSource] = []
    seen: set[str] = set()
    for citation in citations:
        url = (citation.uri or "").strip()
        if not url or url in seen:
            continue
        seen.add(url)
        sources.append(SearchSource(title=citation.title or "Source", url=url))
        if len(sources) >= limit:
            break
    return sources


class SearchService:
    def __init__(self, backend: ResearchBackend, model: str, max_sources: int = 5) -> None:
        self.backend = backend
        self.model = model
        self.max_sources = max_sources

    async def search(self, question: str) -> SearchResult:
        question = (question or "").strip()
        if not question:
            raise ValidationError("Question must not be empty")
        reply = await self.backend.complete_grounded(
            build_search_prompt(question), self.model
        )
        # Sources come from citation metadata only, never from the prose.
        return SearchResult(
            summary=reply.text,
            sources=collect_sources(reply.citations, limit=self.max_sources),
        )
