"""xAI provider implementation."""

from .openai import OpenAICompatibleProvider


class XAIProvider(OpenAICompatibleProvider):
    """xAI provider using the OpenAI SDK."""

    api_key_env = "XAI_API_KEY"
    base_url = "https://api.x.ai/v1"

    def __init__(self, model: str = "grok-code-fast-1", **kwargs):
        super().__init__("xai", model, **kwargs)
