"""Theme watchlist routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from reddit_insight.api.deps import (
    get_insight_service,
    get_theme_service,
    get_theme_service_with_keywords,
)
from reddit_insight.api.errors import service_error_handler
from reddit_insight.modules.insight.schemas import AnalysisResult
from reddit_insight.modules.insight.service import InsightService
from reddit_insight.modules.themes.schemas import Theme, ThemeCreateRequest
from reddit_insight.modules.themes.service import ThemeService

router = APIRouter(prefix="/api", tags=["themes"])


@router.get("/themes", response_model=List[Theme])
@service_error_handler()
async def list_themes(
    service: ThemeService = Depends(get_theme_service),
) -> List[Theme]:
    return service.list_themes()


@router.post("/themes", response_model=Theme)
@service_error_handler()
async def create_theme(
    payload: ThemeCreateRequest,
    service: ThemeService = Depends(get_theme_service_with_keywords),
) -> Theme:
    return await service.add_theme(payload.name)


@router.patch("/themes/{theme_id}/toggle", response_model=Theme)
@service_error_handler()
async def toggle_theme(
    theme_id: str,
    service: ThemeService = Depends(get_theme_service),
) -> Theme:
    return service.toggle(theme_id)


@router.delete("/themes/{theme_id}")
@service_error_handler()
async def delete_theme(
    theme_id: str,
    service: ThemeService = Depends(get_theme_service),
) -> dict:
    if not service.delete(theme_id):
        raise HTTPException(status_code=404, detail=f"Theme not found: {theme_id}")
    return {"deleted": True}


@router.post("/themes/{theme_id}/analyze", response_model=AnalysisResult)
@service_error_handler()
async def analyze_theme(
    theme_id: str,
    force_refresh: bool = False,
    service: ThemeService = Depends(get_theme_service),
    insight_service: InsightService = Depends(get_insight_service),
) -> AnalysisResult:
    theme = service.get(theme_id)
    result = await insight_service.analyze(theme.name, force_refresh=force_refresh)
    service.mark_analyzed(theme.id)
    return result
