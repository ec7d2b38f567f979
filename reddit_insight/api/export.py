"""CSV export routes."""

from __future__ import annotations

import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from reddit_insight.api.deps import get_analysis_cache
from reddit_insight.modules.insight.cache import AnalysisCache
from reddit_insight.modules.insight.schemas import AnalysisResult
from reddit_insight.modules.search.schemas import SearchResult
from reddit_insight.reporting.csv_export import (
    brand_rows,
    pain_point_rows,
    search_rows,
    to_csv,
)

router = APIRouter(prefix="/api/export", tags=["export"])


class SearchExportRequest(BaseModel):
    question: str = Field(min_length=1)
    result: SearchResult


def _csv_response(content: str, filename: str) -> PlainTextResponse:
    # Header values must stay latin-1 safe.
    safe_name = re.sub(r"[^A-Za-z0-9_.-]+", "_", filename).strip("_") or "export"
    return PlainTextResponse(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{safe_name}.csv"'},
    )


def _cached_or_404(cache: AnalysisCache, query: str) -> AnalysisResult:
    # Exports read what the dashboard shows; they never trigger a model call.
    result = cache.get(query)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No cached analysis for: {query}")
    return result


@router.get("/brands.csv")
async def export_brands(
    query: str = Query(min_length=1),
    cache: AnalysisCache = Depends(get_analysis_cache),
) -> PlainTextResponse:
    result = _cached_or_404(cache, query)
    return _csv_response(to_csv(brand_rows(result)), "brand_competitor_analysis")


@router.get("/pain-points.csv")
async def export_pain_points(
    query: str = Query(min_length=1),
    topic: Optional[str] = None,
    cache: AnalysisCache = Depends(get_analysis_cache),
) -> PlainTextResponse:
    result = _cached_or_404(cache, query)
    try:
        rows = pain_point_rows(result, topic_title=topic)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    filename = f"{topic}_pain_points" if topic else "pain_points"
    return _csv_response(to_csv(rows), filename)


@router.post("/search.csv")
async def export_search(payload: SearchExportRequest) -> PlainTextResponse:
    return _csv_response(
        to_csv(search_rows(payload.question, payload.result)),
        "smart_search_results",
    )
