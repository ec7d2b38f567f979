from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class BackendProviderConfig(BaseModel):
    provider_id: str
    type: str = "gemini"
    base_url: str = ""
    models: List[str] = Field(default_factory=lambda: ["gemini-2.5-flash"])
    timeout: int = Field(default=60, ge=3, le=300)
    enabled: bool = True
    auth_mode: Optional[str] = None


class BackendConfig(BaseModel):
    default_provider: str = "gemini"
    default_model: str = "gemini-2.5-flash"
    providers: List[BackendProviderConfig] = Field(default_factory=list)


class ResearchConfig(BaseModel):
    source_domain: str = "reddit.com"
    recency_months: int = Field(default=12, ge=1, le=60)
    subreddit_count: int = Field(default=3, ge=1, le=10)
    thread_count: int = Field(default=10, ge=1, le=50)
    simulated_post_count: int = Field(default=100, ge=10, le=1000)
    fetch_mode: str = "fixed-newest-100"


class CardinalityCaps(BaseModel):
    topics: int = Field(default=4, ge=1)
    subreddits: int = Field(default=3, ge=1)
    pain_points_per_topic: int = Field(default=3, ge=1)
    posts_per_topic: int = Field(default=3, ge=1)
    brands: int = Field(default=4, ge=1)
    posts_per_brand: int = Field(default=1, ge=1)


class SearchConfig(BaseModel):
    max_sources: int = Field(default=5, ge=1, le=20)


class CacheConfig(BaseModel):
    namespace: str = "reddit_insight_"
    themes_key: str = "reddit-insight-themes"


class DatabaseConfig(BaseModel):
    url: str = "sqlite:///data/reddit_insight.db"


def default_backend_providers() -> List[BackendProviderConfig]:
    return [
        BackendProviderConfig(
            provider_id="gemini",
            type="gemini",
            base_url="",
            models=["gemini-2.5-flash", "gemini-2.5-pro"],
            timeout=120,
            enabled=True,
            auth_mode="api_key",
        ),
        BackendProviderConfig(
            provider_id="openai_compatible",
            type="openai_compatible",
            base_url="https://api.openai.com/v1",
            models=["gpt-4o-mini", "gpt-4.1"],
            timeout=120,
            enabled=True,
            auth_mode="api_key",
        ),
        BackendProviderConfig(
            provider_id="mock",
            type="mock",
            base_url="",
            models=["mock-research"],
            timeout=5,
            enabled=True,
            auth_mode="none",
        ),
    ]


class AppConfig(BaseModel):
    config_file: Path = Path("config/settings.yaml")
    backend: BackendConfig = Field(
        default_factory=lambda: BackendConfig(providers=default_backend_providers())
    )
    research: ResearchConfig = Field(default_factory=ResearchConfig)
    caps: CardinalityCaps = Field(default_factory=CardinalityCaps)
    search: SearchConfig = Field(default_factory=SearchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    def ensure_data_root(self) -> None:
        path = self.database.url
        if path.startswith("sqlite:///"):
            db_file = Path(path.replace("sqlite:///", "", 1))
            db_file.parent.mkdir(parents=True, exist_ok=True)

    def normalized(self) -> "AppConfig":
        payload = self.model_dump(mode="python")
        payload["config_file"] = Path(payload["config_file"])
        return AppConfig.model_validate(payload)

    def backend_provider_map(self) -> Dict[str, BackendProviderConfig]:
        return {
            provider.provider_id: provider
            for provider in self.backend.providers
            if provider.enabled
        }


def default_app_config() -> AppConfig:
    return AppConfig(backend=BackendConfig(providers=default_backend_providers()))
