from __future__ import annotations

import logging
from typing import List, NamedTuple, Optional

from reddit_insight.config import AppConfig, BackendProviderConfig
from reddit_insight.core.contracts import ResearchBackend
from reddit_insight.core.errors import ConfigurationError
from reddit_insight.core.registry import ProviderRegistry
from reddit_insight.modules.backend.providers.gemini_provider import GeminiProvider
from reddit_insight.modules.backend.providers.mock_provider import MockResearchBackend
from reddit_insight.modules.backend.providers.openai_compatible_provider import (
    OpenAICompatibleProvider,
)
from reddit_insight.modules.backend.schemas import BackendProviderView, BackendStatusView

logger = logging.getLogger(__name__)


class ResolvedBackend(NamedTuple):
    backend: ResearchBackend
    model: str
    provider_id: str


class BackendService:
    MODULE_NAME = "backend"

    def __init__(
        self,
        config: AppConfig,
        registry: ProviderRegistry,
        api_key: Optional[str] = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.api_key = api_key

        # Register provider factories by type; instances are created per resolve.
        self.registry.register(self.MODULE_NAME, "mock", self._build_mock)
        self.registry.register(self.MODULE_NAME, "gemini", self._build_gemini)
        self.registry.register(
            self.MODULE_NAME, "openai_compatible", self._build_openai_compatible
        )

    def _build_mock(self, provider_config: BackendProviderConfig):
        return MockResearchBackend()

    def _build_gemini(self, provider_config: BackendProviderConfig):
        return GeminiProvider(provider_config=provider_config, api_key=self.api_key)

    def _build_openai_compatible(self, provider_config: BackendProviderConfig):
        return OpenAICompatibleProvider(
            provider_config=provider_config, api_key=self.api_key
        )

    def list_providers(self) -> List[BackendProviderView]:
        return [
            BackendProviderView(
                provider_id=provider.provider_id,
                type=provider.type,
                models=provider.models,
                enabled=provider.enabled,
                auth_mode=self._resolve_auth_mode(provider),
                is_default=provider.provider_id == self.config.backend.default_provider,
            )
            for provider in self.config.backend.providers
        ]

    def check_ready(self, provider_id: Optional[str] = None) -> BackendProviderConfig:
        """Return the provider config or raise ``ConfigurationError``."""
        target = provider_id or self.config.backend.default_provider
        provider = self.config.backend_provider_map().get(target)
        if provider is None:
            raise ConfigurationError(f"Backend provider is unknown or disabled: {target}")
        if not self.registry.has(self.MODULE_NAME, provider.type):
            raise ConfigurationError(f"Unsupported backend provider type: {provider.type}")
        if self._resolve_auth_mode(provider) == "api_key" and not self.api_key:
            raise ConfigurationError(
                "API key is missing. Set REDDIT_INSIGHT_API_KEY (or API_KEY) "
                "in the environment or .env file."
            )
        return provider

    def status(self, provider_id: Optional[str] = None) -> BackendStatusView:
        target = provider_id or self.config.backend.default_provider
        try:
            provider = self.check_ready(target)
        except ConfigurationError as exc:
            return BackendStatusView(configured=False, provider_id=target, message=str(exc))
        return BackendStatusView(
            configured=True,
            provider_id=provider.provider_id,
            model=self._resolve_model(provider, None),
            message="ready",
        )

    def resolve(
        self, provider_id: Optional[str] = None, model: Optional[str] = None
    ) -> ResolvedBackend:
        provider = self.check_ready(provider_id)
        backend = self.registry.resolve(
            self.MODULE_NAME, provider.type, provider_config=provider
        )
        resolved_model = self._resolve_model(provider, model)
        logger.debug("Using backend %s / %s", provider.provider_id, resolved_model)
        return ResolvedBackend(
            backend=backend, model=resolved_model, provider_id=provider.provider_id
        )

    def _resolve_model(
        self, provider: BackendProviderConfig, model: Optional[str]
    ) -> str:
        if model:
            return model
        default_model = self.config.backend.default_model
        if provider.provider_id == self.config.backend.default_provider and default_model:
            return default_model
        if provider.models:
            return provider.models[0]
        return default_model

    @staticmethod
    def _resolve_auth_mode(provider: BackendProviderConfig) -> str:
        if provider.auth_mode:
            return provider.auth_mode
        return "none" if provider.type == "mock" else "api_key"
