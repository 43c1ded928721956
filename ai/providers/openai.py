"""OpenAI provider implementation."""

import os
from typing import AsyncIterator, Dict, List, Optional

from openai import AsyncOpenAI

from .base import BaseProvider


class OpenAICompatibleProvider(BaseProvider):
    """Provider speaking the OpenAI chat completions API."""

    api_key_env = "OPENAI_API_KEY"
    base_url: Optional[str] = None

    def __init__(self, name: str = "openai", model: str = "gpt-4o-mini", **kwargs):
        super().__init__(name, model, **kwargs)
        self.client: Optional[AsyncOpenAI] = None

    def is_available(self) -> bool:
        """Check if the API key is set."""
        return bool(os.getenv(self.api_key_env))

    def _ensure_client(self) -> AsyncOpenAI:
        """Ensure the client is initialized."""
        if self.client is None:
            api_key = os.getenv(self.api_key_env)
            if not api_key:
                raise RuntimeError(f"{self.api_key_env} not set")
            self.client = AsyncOpenAI(api_key=api_key, base_url=self.base_url)
        return self.client

    async def _stream_impl(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Stream chat completion deltas."""
        client = self._ensure_client()
        stream = await client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            stream=True,
            timeout=self.timeout
        )
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content


class OpenAIProvider(OpenAICompatibleProvider):
    """OpenAI provider."""

    def __init__(self, model: str = "gpt-4o-mini", **kwargs):
        super().__init__("openai", model, **kwargs)
