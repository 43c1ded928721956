"""Base provider interface."""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Callable, Dict, List, Optional, Protocol

from core.errors import ProviderConnectionError

OnChunk = Callable[[str], None]
OnFinish = Callable[[], None]
OnError = Callable[[BaseException], None]


class Provider(Protocol):
    """Protocol for completion providers."""

    name: str

    @abstractmethod
    async def stream_completion(
        self,
        messages: List[Dict[str, str]],
        on_chunk: OnChunk,
        on_finish: OnFinish,
        on_error: OnError
    ) -> None:
        """Stream a chat completion, reporting through the callbacks."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is available (API key, etc.)."""
        ...


class BaseProvider(ABC):
    """Base provider implementation with common functionality."""

    def __init__(self, name: str, model: str, temperature: float = 0.1,
                 max_tokens: Optional[int] = None, timeout: Optional[float] = None):
        self.name = name
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is available (API key, etc.)."""
        ...

    @abstractmethod
    def _stream_impl(self, messages: List[Dict[str, str]]) -> AsyncIterator[str]:
        """Implementation-specific streaming; yields content deltas."""
        ...

    async def stream_completion(self, messages, on_chunk, on_finish, on_error):
        """Stream a completion, with availability check; errors go to on_error."""
        if not self.is_available():
            on_error(ProviderConnectionError(f"Provider {self.name} is not available"))
            return
        try:
            async for content in self._stream_impl(messages):
                if content:
                    on_chunk(content)
        except Exception as e:
            on_error(ProviderConnectionError(f"{self.name} request failed: {e}", provider=self.name))
            return
        on_finish()
