from __future__ import annotations

from typing import Any, List

from reddit_insight.core.contracts import ResearchBackend
from reddit_insight.core.errors import ValidationError
from reddit_insight.core.utils import extract_json

# Keyword replies are arrays, so the bracket span is tried before the brace span.
_KEYWORD_BOUNDARIES = (("[", "]"), ("{", "}"))


def _is_keyword_document(document: Any) -> bool:
    if isinstance(document, dict):
        return isinstance(document.get("keywords"), list)
    return isinstance(document, list)


def build_keyword_prompt(theme: str) -> str:
    return (
        "Generate 5-8 relevant search keywords or sub-topics for the market "
        f'research theme: "{theme}".\n'
        "Return ONLY a JSON array of strings. Keywords should be in Simplified "
        "Chinese if the theme is Chinese, otherwise relevant to the language. "
        'Example: ["keyword1", "keyword2"].'
    )


class KeywordSuggestionService:
    def __init__(self, backend: ResearchBackend, model: str) -> None:
        self.backend = backend
        self.model = model

    async def suggest(self, theme: str) -> List[str]:
        theme = (theme or "").strip()
        if not theme:
            raise ValidationError("Theme must not be empty")
        raw_text = await self.backend.complete_json(
            build_keyword_prompt(theme), self.model
        )
        document = extract_json(
            raw_text, boundaries=_KEYWORD_BOUNDARIES, accept=_is_keyword_document
        )
        return self._to_keywords(document)

    @staticmethod
    def _to_keywords(document: Any) -> List[str]:
        if isinstance(document, dict):
            document = document["keywords"]
        keywords: List[str] = []
        seen: set[str] = set()
        for entry in document:
            if entry is None or isinstance(entry, (dict, list)):
                continue
            keyword = str(entry).strip()
            if not keyword or keyword.lower() in seen:
                continue
            seen.add(keyword.lower())
            keywords.append(keyword)
        return keywords
