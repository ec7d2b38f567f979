from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REDDIT_INSIGHT_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    config_file: Path = Path("config/settings.yaml")
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    # The dashboard historically read a bare API_KEY; both names are honoured.
    api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("REDDIT_INSIGHT_API_KEY", "API_KEY", "api_key"),
    )
