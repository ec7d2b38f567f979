from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Dict

from reddit_insight.core.errors import ProviderNotFoundError

ProviderFactory = Callable[..., Any]


class ProviderRegistry:
    def __init__(self) -> None:
        self._registry: Dict[str, Dict[str, ProviderFactory]] = defaultdict(dict)

    def register(self, module: str, provider_type: str, factory: ProviderFactory) -> None:
        self._registry[module][provider_type] = factory

    def has(self, module: str, provider_type: str) -> bool:
        return provider_type in self._registry.get(module, {})

    def resolve(self, module: str, provider_type: str, **kwargs: Any) -> Any:
        module_map = self._registry.get(module)
        if not module_map or provider_type not in module_map:
            raise ProviderNotFoundError(
                f"Provider not found: module={module}, type={provider_type}"
            )
        return module_map[provider_type](**kwargs)

    def list_types(self, module: str) -> list[str]:
        return sorted(self._registry.get(module, {}).keys())
