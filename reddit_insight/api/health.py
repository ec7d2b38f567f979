"""Health and backend status routes."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from reddit_insight.api.deps import get_backend_status, get_config, get_settings
from reddit_insight.config import AppConfig
from reddit_insight.core.registry import ProviderRegistry
from reddit_insight.modules.backend.schemas import BackendProviderView, BackendStatusView
from reddit_insight.modules.backend.service import BackendService
from reddit_insight.settings import AppSettings

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(
    status: BackendStatusView = Depends(get_backend_status),
) -> dict:
    return {"status": "ok", "backend": status.model_dump()}


@router.get("/providers", response_model=List[BackendProviderView])
async def list_providers(
    config: AppConfig = Depends(get_config),
    settings: AppSettings = Depends(get_settings),
) -> List[BackendProviderView]:
    service = BackendService(config=config, registry=ProviderRegistry(), api_key=settings.api_key)
    return service.list_providers()
