"""FastAPI dependency factories for service injection."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from reddit_insight.config import AppConfig
from reddit_insight.core.contracts import KeyValueStore
from reddit_insight.core.errors import ConfigurationError
from reddit_insight.core.registry import ProviderRegistry
from reddit_insight.modules.backend.schemas import BackendStatusView
from reddit_insight.modules.backend.service import BackendService, ResolvedBackend
from reddit_insight.modules.insight.cache import AnalysisCache
from reddit_insight.modules.insight.service import InsightService
from reddit_insight.modules.keywords.service import KeywordSuggestionService
from reddit_insight.modules.search.service import SearchService
from reddit_insight.modules.themes.service import ThemeService
from reddit_insight.services.config_store import ConfigStore
from reddit_insight.settings import AppSettings


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def get_config_store(request: Request) -> ConfigStore:
    return request.app.state.config_store


def get_config(request: Request) -> AppConfig:
    config_store: ConfigStore = request.app.state.config_store
    return config_store.load()


def get_kv_store(request: Request) -> KeyValueStore:
    return request.app.state.kv_store


def get_backend_status(request: Request) -> BackendStatusView:
    return request.app.state.backend_status


def get_backend(request: Request) -> ResolvedBackend:
    # The missing-credential notice is computed once at startup and blocks
    # every backend call until the deployment is reconfigured.
    status = get_backend_status(request)
    if not status.configured:
        raise HTTPException(status_code=503, detail=status.message)
    service = BackendService(
        config=get_config(request),
        registry=ProviderRegistry(),
        api_key=get_settings(request).api_key,
    )
    try:
        return service.resolve(provider_id=status.provider_id)
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def get_analysis_cache(request: Request) -> AnalysisCache:
    config = get_config(request)
    return AnalysisCache(get_kv_store(request), namespace=config.cache.namespace)


def get_insight_service(
    request: Request,
    resolved: ResolvedBackend = Depends(get_backend),
) -> InsightService:
    config = get_config(request)
    return InsightService(
        backend=resolved.backend,
        model=resolved.model,
        cache=get_analysis_cache(request),
        research=config.research,
        caps=config.caps,
    )


def get_keyword_service(
    resolved: ResolvedBackend = Depends(get_backend),
) -> KeywordSuggestionService:
    return KeywordSuggestionService(backend=resolved.backend, model=resolved.model)


def get_search_service(
    request: Request,
    resolved: ResolvedBackend = Depends(get_backend),
) -> SearchService:
    config = get_config(request)
    return SearchService(
        backend=resolved.backend,
        model=resolved.model,
        max_sources=config.search.max_sources,
    )


def get_theme_service(request: Request) -> ThemeService:
    config = get_config(request)
    return ThemeService(get_kv_store(request), storage_key=config.cache.themes_key)


def get_theme_service_with_keywords(
    request: Request,
    keyword_service: KeywordSuggestionService = Depends(get_keyword_service),
) -> ThemeService:
    config = get_config(request)
    return ThemeService(
        get_kv_store(request),
        keyword_service=keyword_service,
        storage_key=config.cache.themes_key,
    )
