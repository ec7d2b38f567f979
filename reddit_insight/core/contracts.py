from __future__ import annotations

from typing import Optional, Protocol

from reddit_insight.core.types import GroundedReply


class ResearchBackend(Protocol):
    """Model backend reached through exactly two call shapes.

    ``complete_grounded`` augments generation with live web search and returns
    the citation records alongside the text. ``complete_json`` asks for a
    structured document and returns the raw reply text, which may still need
    extraction.
    """

    provider_id: str

    async def complete_grounded(self, prompt: str, model: str) -> GroundedReply:
        ...

    async def complete_json(self, prompt: str, model: str) -> str:
        ...


class KeyValueStore(Protocol):
    def read(self, key: str) -> Optional[str]:
        ...

    def write(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...
