from __future__ import annotations

import json
import logging
from typing import Any

from openai import AsyncOpenAI

from lecture_pilot.core.config import Settings, settings as default_settings
from lecture_pilot.core.errors import GenerationError

logger = logging.getLogger(__name__)


def extract_json(text: str) -> Any:
    """
    Best-effort JSON extraction if model returns extra text.
    """
    text = (text or "").strip()
    if not text:
        raise ValueError("Empty response from OpenAI")

    # Fast path
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try to find the outermost JSON object or array
    for open_ch, close_ch in (("{", "}"), ("[", "]")):
        start = text.find(open_ch)
        end = text.rfind(close_ch)
        if start >= 0 and end > start:
            try:
                return json.loads(text[start : end + 1])
            except json.JSONDecodeError:
                continue

    raise ValueError(f"OpenAI returned non-JSON. First 200 chars: {text[:200]!r}")


def _build_openai_client(cfg: Settings) -> AsyncOpenAI:
    if not cfg.openai_api_key:
        raise GenerationError("OPENAI_API_KEY is missing")
    return AsyncOpenAI(
        api_key=cfg.openai_api_key,
        timeout=cfg.openai_timeout_sec,
        max_retries=cfg.openai_max_retries,
    )


class LLMClient:
    """
    Async wrapper around the OpenAI SDK covering the four request shapes the
    generators need: plain text, JSON-schema structured output, web-search
    grounded text, and multi-turn chat.

    Tool use and structured output are never combined in one request.
    """

    def __init__(self, cfg: Settings | None = None, client: AsyncOpenAI | None = None) -> None:
        self.cfg = cfg or default_settings
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # built lazily so the app can boot without an API key
        if self._client is None:
            self._client = _build_openai_client(self.cfg)
        return self._client

    async def _complete(self, messages: list[dict[str, str]], **kwargs: Any) -> str:
        try:
            chat = await self.client.chat.completions.create(
                model=self.cfg.openai_model,
                messages=messages,
                **kwargs,
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"OpenAI request failed: {e}") from e

        text = (chat.choices[0].message.content or "").strip()
        if not text:
            raise GenerationError("Empty response from OpenAI")
        return text

    async def generate_text(self, prompt: str, *, system: str | None = None) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return await self._complete(messages)

    async def generate_json(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        name: str = "response",
        system: str | None = None,
    ) -> Any:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        raw = await self._complete(
            messages,
            response_format={
                "type": "json_schema",
                "json_schema": {"name": name, "strict": True, "schema": schema},
            },
        )
        try:
            return extract_json(raw)
        except ValueError as e:
            raise GenerationError(str(e)) from e

    async def search_and_generate(self, prompt: str) -> str:
        """Web-search grounded generation via the Responses API."""
        try:
            resp = await self.client.responses.create(
                model=self.cfg.openai_search_model,
                input=prompt,
                tools=[{"type": "web_search_preview"}],
            )
        except GenerationError:
            raise
        except Exception as e:
            raise GenerationError(f"OpenAI web search request failed: {e}") from e

        text = (getattr(resp, "output_text", None) or "").strip()
        if not text:
            raise GenerationError("Empty response from OpenAI web search")
        return text

    async def chat(self, messages: list[dict[str, str]]) -> str:
        return await self._complete(messages)
