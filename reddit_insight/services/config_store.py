from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from reddit_insight.config import (
    AppConfig,
    default_app_config,
    default_backend_providers,
)


class ConfigStore:
    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path

    def load(self) -> AppConfig:
        if not self.config_path.exists():
            config = (
                default_app_config()
                .model_copy(update={"config_file": self.config_path})
                .normalized()
            )
            return self.save(config)

        raw = yaml.safe_load(self.config_path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config file content: {self.config_path}")
        config = AppConfig.model_validate(raw).normalized()
        config = self._normalize_backend_providers(config, raw_config=raw)
        config.ensure_data_root()
        return config

    def save(self, config: AppConfig) -> AppConfig:
        normalized = config.model_copy(
            update={"config_file": self.config_path}
        ).normalized()
        normalized.ensure_data_root()
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        payload = normalized.model_dump(mode="json")
        self.config_path.write_text(
            yaml.safe_dump(payload, allow_unicode=True, sort_keys=False),
            encoding="utf-8",
        )
        return normalized

    def patch(self, patch_data: Dict[str, Any]) -> AppConfig:
        current = self.load()
        payload = current.model_dump(mode="python")
        payload.update(patch_data)
        merged = AppConfig.model_validate(payload)
        return self.save(merged)

    @staticmethod
    def _normalize_backend_providers(
        config: AppConfig, raw_config: Dict[str, Any]
    ) -> AppConfig:
        providers = []
        seen: set[str] = set()
        for provider in config.backend.providers:
            provider_id = provider.provider_id.strip()
            if not provider_id or provider_id in seen:
                continue
            seen.add(provider_id)
            providers.append(provider.model_copy(update={"provider_id": provider_id}))

        raw_backend = raw_config.get("backend")
        raw_providers = (
            raw_backend.get("providers") if isinstance(raw_backend, dict) else None
        )
        if not isinstance(raw_providers, list):
            # Older files without a provider list get the built-in set.
            for provider in default_backend_providers():
                if provider.provider_id not in seen:
                    providers.append(provider)
                    seen.add(provider.provider_id)

        backend = config.backend.model_copy(update={"providers": providers})
        if backend.default_provider not in seen and providers:
            backend = backend.model_copy(
                update={
                    "default_provider": providers[0].provider_id,
                    "default_model": providers[0].models[0] if providers[0].models else "",
                }
            )
        return config.model_copy(update={"backend": backend})
