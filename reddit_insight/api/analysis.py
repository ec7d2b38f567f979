"""Market analysis routes (run, cached read, cache invalidation)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from reddit_insight.api.deps import get_analysis_cache, get_insight_service
from reddit_insight.api.errors import service_error_handler
from reddit_insight.modules.insight.cache import AnalysisCache
from reddit_insight.modules.insight.schemas import AnalysisResult, AnalysisRunRequest
from reddit_insight.modules.insight.service import InsightService

router = APIRouter(prefix="/api", tags=["analysis"])


@router.post("/analysis", response_model=AnalysisResult)
@service_error_handler()
async def run_analysis(
    payload: AnalysisRunRequest,
    service: InsightService = Depends(get_insight_service),
) -> AnalysisResult:
    return await service.analyze(payload.query, force_refresh=payload.force_refresh)


@router.get("/analysis/cached", response_model=AnalysisResult)
async def cached_analysis(
    query: str = Query(min_length=1),
    cache: AnalysisCache = Depends(get_analysis_cache),
) -> AnalysisResult:
    result = cache.get(query)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No cached analysis for: {query}")
    return result


@router.delete("/analysis/cache")
@service_error_handler()
async def invalidate_analysis(
    query: str = Query(min_length=1),
    cache: AnalysisCache = Depends(get_analysis_cache),
) -> dict:
    cache.invalidate(query)
    return {"deleted": True, "key": cache.key_for(query)}
