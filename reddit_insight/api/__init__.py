"""Reddit Insight API package: FastAPI application factory."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from reddit_insight.api import analysis, export, health, keywords, search, themes
from reddit_insight.core.contracts import KeyValueStore
from reddit_insight.core.registry import ProviderRegistry
from reddit_insight.infra.kv.store import SqlKeyValueStore
from reddit_insight.modules.backend.service import BackendService
from reddit_insight.services.config_store import ConfigStore
from reddit_insight.settings import AppSettings

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    config_store: Optional[ConfigStore] = None,
    kv_store: Optional[KeyValueStore] = None,
) -> FastAPI:
    settings = settings or AppSettings()
    config_store = config_store or ConfigStore(config_path=settings.config_file)
    config = config_store.load()

    app = FastAPI(
        title="Reddit Insight API",
        version="0.1.0",
        default_response_class=ORJSONResponse,
    )

    # ---------- state --------------------------------------------------------
    app.state.settings = settings
    app.state.config_store = config_store
    app.state.kv_store = (
        kv_store if kv_store is not None else SqlKeyValueStore(config.database.url)
    )

    # Credential problems are detected once here and reported by every
    # backend-dependent route until the process is restarted.
    backend_status = BackendService(
        config=config, registry=ProviderRegistry(), api_key=settings.api_key
    ).status()
    if not backend_status.configured:
        logger.warning("Research backend not configured: %s", backend_status.message)
    app.state.backend_status = backend_status

    # ---------- CORS ---------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- routers ------------------------------------------------------
    app.include_router(health.router)
    app.include_router(analysis.router)
    app.include_router(keywords.router)
    app.include_router(search.router)
    app.include_router(themes.router)
    app.include_router(export.router)

    return app
