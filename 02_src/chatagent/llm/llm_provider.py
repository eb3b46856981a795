"""LLM Provider implementation using Anthropic Claude API."""

import os
from typing import Protocol

import anthropic

from ..config import DEFAULT_LLM_MODEL


class ILLMProvider(Protocol):
    """Abstraction for LLM access."""

    async def complete(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 1024,
        stop: list[str] | None = None,
    ) -> str:
        """Generate completion."""
        ...


def apply_stop_sequences(text: str, stop: list[str] | None) -> str:
    """Truncate text at the first occurrence of any stop sequence."""
    if not stop:
        return text
    cut = len(text)
    for sequence in stop:
        if not sequence:
            continue
        index = text.find(sequence)
        if index != -1:
            cut = min(cut, index)
    return text[:cut]


class LLMProvider:
    """Anthropic Claude API provider."""

    def __init__(self, api_key: str | None = None, model: str = DEFAULT_LLM_MODEL):
        self._api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._model = model
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    async def complete(
        self,
        messages: list[dict],
        system: str | None = None,
        max_tokens: int = 1024,
        stop: list[str] | None = None,
    ) -> str:
        """Generate completion using Claude API."""
        # The API rejects whitespace-only stop sequences; those are applied locally
        remote_stop = [s for s in stop or [] if s.strip()]

        kwargs: dict = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if system:
            kwargs["system"] = system
        if remote_stop:
            kwargs["stop_sequences"] = remote_stop

        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            raise RuntimeError(f"LLM API error: {e}") from e

        text = next(
            (block.text for block in response.content or [] if block.type == "text"), ""
        )
        return apply_stop_sequences(text, stop)
