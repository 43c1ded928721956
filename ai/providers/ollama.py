"""Ollama provider implementation."""

import os

from openai import AsyncOpenAI

from .openai import OpenAICompatibleProvider


class OllamaProvider(OpenAICompatibleProvider):
    """Local Ollama server through its OpenAI-compatible endpoint."""

    host_env = "OLLAMA_HOST"

    def __init__(self, model: str = "qwen2.5-coder", **kwargs):
        super().__init__("ollama", model, **kwargs)
        host = os.getenv(self.host_env, "http://localhost:11434")
        if not host.startswith("http"):
            host = f"http://{host}"
        self.base_url = f"{host.rstrip('/')}/v1"

    def is_available(self) -> bool:
        """Ollama is used only when OLLAMA_HOST is set."""
        return bool(os.getenv(self.host_env))

    def _ensure_client(self) -> AsyncOpenAI:
        if self.client is None:
            # Ollama ignores the key, but the SDK requires one.
            self.client = AsyncOpenAI(api_key="ollama", base_url=self.base_url)
        return self.client
