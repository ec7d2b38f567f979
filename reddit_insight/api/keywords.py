"""Keyword suggestion routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from reddit_insight.api.deps import get_keyword_service
from reddit_insight.api.errors import service_error_handler
from reddit_insight.modules.keywords.service import KeywordSuggestionService

router = APIRouter(prefix="/api", tags=["keywords"])


class KeywordSuggestRequest(BaseModel):
    theme: str = Field(min_length=1)


class KeywordSuggestResponse(BaseModel):
    theme: str
    keywords: List[str]


@router.post("/keywords/suggest", response_model=KeywordSuggestResponse)
@service_error_handler()
async def suggest_keywords(
    payload: KeywordSuggestRequest,
    service: KeywordSuggestionService = Depends(get_keyword_service),
) -> KeywordSuggestResponse:
    keywords = await service.suggest(payload.theme)
    return KeywordSuggestResponse(theme=payload.theme, keywords=keywords)
