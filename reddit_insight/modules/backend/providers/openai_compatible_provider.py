from __future__ import annotations

from openai import AsyncOpenAI, OpenAIError

from reddit_insight.config import BackendProviderConfig
from reddit_insight.core.errors import ConfigurationError, UpstreamError
from reddit_insight.core.types import GroundedReply

_JSON_SYSTEM_PROMPT = (
    "You are a market research data engine. Return raw JSON only. "
    "Do NOT wrap output with markdown code fences."
)
_TEXT_SYSTEM_PROMPT = "You are a market research analyst summarizing Reddit discussions."


class OpenAICompatibleProvider:
    """Chat-completions backend.

    Plain chat completions have no search tool, so grounded requests are
    answered from model knowledge and carry no citations.
    """

    provider_id = "openai_compatible"

    def __init__(self, provider_config: BackendProviderConfig, api_key: str | None = None) -> None:
        if not api_key:
            raise ConfigurationError("API key is required for openai_compatible provider")
        self.provider_config = provider_config
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=provider_config.base_url or None,
            timeout=provider_config.timeout,
        )

    async def complete_grounded(self, prompt: str, model: str) -> GroundedReply:
        content = await self._complete(prompt, model, _TEXT_SYSTEM_PROMPT)
        return GroundedReply(text=content, citations=[])

    async def complete_json(self, prompt: str, model: str) -> str:
        return await self._complete(prompt, model, _JSON_SYSTEM_PROMPT)

    async def _complete(self, prompt: str, model: str, system_prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=model,
                temperature=0.2,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
            )
        except OpenAIError as exc:
            raise UpstreamError(f"OpenAI-compatible request failed: {exc}") from exc
        if not response.choices:
            raise UpstreamError("OpenAI-compatible request returned no choices")
        return (response.choices[0].message.content or "").strip()
