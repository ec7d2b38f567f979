from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class SearchSource(BaseModel):
    title: str
    url: str


class SearchResult(BaseModel):
    summary: str
    sources: List[SearchSource] = Field(default_factory=list)


class SearchRequest(BaseModel):
    question: str = Field(min_length=1)
