from __future__ import annotations

from typing import Any, List

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from reddit_insight.config import BackendProviderConfig
from reddit_insight.core.errors import ConfigurationError, UpstreamError
from reddit_insight.core.types import Citation, GroundedReply


class GeminiProvider:
    provider_id = "gemini"

    def __init__(self, provider_config: BackendProviderConfig, api_key: str | None = None) -> None:
        if not api_key:
            raise ConfigurationError("API key is required for gemini provider")
        self.provider_config = provider_config
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=provider_config.timeout * 1000),
        )

    async def complete_grounded(self, prompt: str, model: str) -> GroundedReply:
        config = types.GenerateContentConfig(
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        response = await self._generate(prompt, model, config)
        return GroundedReply(
            text=response.text or "",
            citations=self._citations(response),
        )

    async def complete_json(self, prompt: str, model: str) -> str:
        config = types.GenerateContentConfig(response_mime_type="application/json")
        response = await self._generate(prompt, model, config)
        return response.text or ""

    async def _generate(
        self, prompt: str, model: str, config: types.GenerateContentConfig
    ) -> types.GenerateContentResponse:
        try:
            return await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise UpstreamError(f"Gemini request failed: {exc}") from exc

    @staticmethod
    def _citations(response: Any) -> List[Citation]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []
        metadata = getattr(candidates[0], "grounding_metadata", None)
        chunks = getattr(metadata, "grounding_chunks", None) or []
        citations: List[Citation] = []
        for chunk in chunks:
            web = getattr(chunk, "web", None)
            uri = getattr(web, "uri", None) if web is not None else None
            if not uri:
                continue
            citations.append(Citation(uri=uri, title=getattr(web, "title", None) or ""))
        return citations
