from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from reddit_insight.core.contracts import KeyValueStore
from reddit_insight.core.errors import ValidationError
from reddit_insight.modules.keywords.service import KeywordSuggestionService
from reddit_insight.modules.themes.schemas import Theme

logger = logging.getLogger(__name__)

_THEME_LIST = TypeAdapter(List[Theme])


class ThemeService:
    """User-managed watchlist of research themes.

    The whole list lives under one key of the store, separate from the
    analysis cache entries.
    """

    def __init__(
        self,
        store: KeyValueStore,
        keyword_service: Optional[KeywordSuggestionService] = None,
        storage_key: str = "reddit-insight-themes",
    ) -> None:
        self.store = store
        self.keyword_service = keyword_service
        self.storage_key = storage_key

    def list_themes(self) -> List[Theme]:
        raw = self.store.read(self.storage_key)
        if not raw:
            return []
        try:
            return _THEME_LIST.validate_json(raw)
        except PydanticValidationError as exc:
            # Keep list APIs stable when the stored list is broken.
            logger.warning("Ignoring unreadable theme list: %s", exc)
            return []

    def list_active(self) -> List[Theme]:
        return [theme for theme in self.list_themes() if theme.is_active]

    def get(self, theme_id: str) -> Theme:
        for theme in self.list_themes():
            if theme.id == theme_id:
                return theme
        raise LookupError(f"Theme not found: {theme_id}")

    async def add_theme(self, name: str) -> Theme:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Theme name must not be empty")
        themes = self.list_themes()
        if any(theme.name.lower() == name.lower() for theme in themes):
            raise ValidationError(f"Theme already exists: {name}")
        if self.keyword_service is None:
            raise ValidationError("Keyword suggestions are not available")
        keywords = await self.keyword_service.suggest(name)
        theme = Theme(id=uuid4().hex, name=name, keywords=keywords, is_active=True)
        themes.append(theme)
        self._save(themes)
        return theme

    def toggle(self, theme_id: str) -> Theme:
        return self._update(theme_id, lambda theme: {"is_active": not theme.is_active})

    def mark_analyzed(self, theme_id: str, when: Optional[datetime] = None) -> Theme:
        stamp = when or datetime.now(timezone.utc)
        return self._update(theme_id, lambda theme: {"last_analyzed": stamp})

    def delete(self, theme_id: str) -> bool:
        themes = self.list_themes()
        remaining = [theme for theme in themes if theme.id != theme_id]
        if len(remaining) == len(themes):
            return False
        self._save(remaining)
        return True

    def _update(self, theme_id: str, changes) -> Theme:
        themes = self.list_themes()
        for index, theme in enumerate(themes):
            if theme.id == theme_id:
                updated = theme.model_copy(update=changes(theme))
                themes[index] = updated
                self._save(themes)
                return updated
        raise LookupError(f"Theme not found: {theme_id}")

    def _save(self, themes: List[Theme]) -> None:
        payload = [theme.model_dump(mode="json", by_alias=True) for theme in themes]
        self.store.write(self.storage_key, json.dumps(payload, ensure_ascii=False))
