from __future__ import annotations

import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from reddit_insight.core.contracts import KeyValueStore
from reddit_insight.core.errors import CacheCorruption, StorageError
from reddit_insight.core.utils import DEFAULT_CACHE_NAMESPACE, cache_key
from reddit_insight.modules.insight.schemas import AnalysisResult

logger = logging.getLogger(__name__)


class AnalysisCache:
    """Persistent query -> last successful ``AnalysisResult`` mapping.

    Entries never expire; a forced refresh is the only way to replace one.
    Corrupt entries are evicted on read and never reported to the caller.
    """

    def __init__(
        self, store: KeyValueStore, namespace: str = DEFAULT_CACHE_NAMESPACE
    ) -> None:
        self.store = store
        self.namespace = namespace

    def key_for(self, query: str) -> str:
        return cache_key(query, namespace=self.namespace)

    def get(self, query: str) -> Optional[AnalysisResult]:
        key = self.key_for(query)
        try:
            raw = self.store.read(key)
        except StorageError as exc:
            logger.error("Failed to read analysis cache entry %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            result = self._decode(raw)
        except CacheCorruption as exc:
            logger.warning("Evicting corrupt cache entry %s: %s", key, exc)
            try:
                self.store.delete(key)
            except StorageError as delete_exc:
                logger.error("Failed to evict cache entry %s: %s", key, delete_exc)
            return None
        logger.info("Loaded cached analysis for %r", query)
        return result

    def put(self, query: str, result: AnalysisResult) -> None:
        key = self.key_for(query)
        try:
            self.store.write(key, result.model_dump_json(by_alias=True))
        except StorageError as exc:
            # The caller already holds the fresh result in memory.
            logger.error("Failed to save analysis cache entry %s: %s", key, exc)

    def invalidate(self, query: str) -> None:
        self.store.delete(self.key_for(query))

    @staticmethod
    def _decode(raw: str) -> AnalysisResult:
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise CacheCorruption(f"not valid JSON ({exc})") from exc
        if not isinstance(payload, dict) or not payload.get("metrics"):
            raise CacheCorruption("missing metrics")
        try:
            return AnalysisResult.model_validate(payload)
        except PydanticValidationError as exc:
            raise CacheCorruption(f"schema mismatch ({exc.error_count()} errors)") from exc
