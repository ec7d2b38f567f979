"""Ad-hoc grounded search routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from reddit_insight.api.deps import get_search_service
from reddit_insight.api.errors import service_error_handler
from reddit_insight.modules.search.schemas import SearchRequest, SearchResult
from reddit_insight.modules.search.service import SearchService

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search", response_model=SearchResult)
@service_error_handler()
async def run_search(
    payload: SearchRequest,
    service: SearchService = Depends(get_search_service),
) -> SearchResult:
    return await service.search(payload.question)
