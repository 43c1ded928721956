"""Provider selection and request guarding for suggestion requests."""

import logging
import time
from enum import Enum
from typing import Callable, Dict, List, Optional

from core.config import Config
from core.errors import ProviderConnectionError
from ai.providers.base import BaseProvider, OnChunk, OnError, OnFinish
from ai.providers.ollama import OllamaProvider
from ai.providers.openai import OpenAIProvider
from ai.providers.xai import XAIProvider

logger = logging.getLogger(__name__)

PROVIDER_ORDER = ("xai", "openai", "ollama")


class CircuitBreakerState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Circuit breaker for provider calls."""

    def __init__(self, fail_threshold: int, cooldown_sec: int, clock: Callable[[], float] = time.time):
        self.fail_threshold = fail_threshold
        self.cooldown_sec = cooldown_sec
        self.clock = clock
        self.state = CircuitBreakerState.CLOSED
        self.failure_count = 0
        self.last_failure_time = 0.0
        self.next_attempt_time = 0.0

    def should_attempt(self) -> bool:
        """Check if we should attempt the call."""
        now = self.clock()

        if self.state == CircuitBreakerState.CLOSED:
            return True
        elif self.state == CircuitBreakerState.OPEN:
            if now >= self.next_attempt_time:
                self.state = CircuitBreakerState.HALF_OPEN
                return True
            return False
        elif self.state == CircuitBreakerState.HALF_OPEN:
            return True
        return False

    def record_success(self):
        """Record a successful call."""
        self.failure_count = 0
        self.state = CircuitBreakerState.CLOSED

    def record_failure(self):
        """Record a failed call."""
        now = self.clock()
        self.failure_count += 1
        self.last_failure_time = now

        if self.state == CircuitBreakerState.HALF_OPEN or self.failure_count >= self.fail_threshold:
            self.state = CircuitBreakerState.OPEN
            self.next_attempt_time = now + self.cooldown_sec

    def get_state(self) -> str:
        """Get current state as string."""
        return self.state.value


def build_providers(config: Config) -> Dict[str, BaseProvider]:
    """Instantiate every known provider; the configured one gets the configured model."""
    settings = dict(
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        timeout=config.network_request_timeout_sec
    )
    providers: Dict[str, BaseProvider] = {}
    for name, provider_cls in (("xai", XAIProvider), ("openai", OpenAIProvider), ("ollama", OllamaProvider)):
        if name == config.provider:
            providers[name] = provider_cls(model=config.model, **settings)
        else:
            providers[name] = provider_cls(**settings)
    return providers


def select_provider(config: Config, providers: Optional[Dict[str, BaseProvider]] = None) -> BaseProvider:
    """
    Select the configured provider, falling back to any available one.

    Raises:
        ProviderConnectionError: If no provider is available.
    """
    providers = providers or build_providers(config)
    provider = providers.get(config.provider)
    if provider and provider.is_available():
        return provider
    for name in PROVIDER_ORDER:
        fallback = providers.get(name)
        if fallback and fallback.is_available():
            logger.info(f"Provider {config.provider} unavailable, using {name}")
            return fallback
    raise ProviderConnectionError("No AI providers available")


class GuardedProvider:
    """
    Wraps a provider with an offline switch and a circuit breaker.

    Failed requests are not retried; the next edit signal triggers a fresh attempt.
    """

    def __init__(self, provider, offline: bool = False, breaker: Optional[CircuitBreaker] = None):
        self.provider = provider
        self.name = provider.name
        self.offline = offline
        self.breaker = breaker or CircuitBreaker(fail_threshold=5, cooldown_sec=60)

    @classmethod
    def from_config(cls, config: Config) -> "GuardedProvider":
        return cls(
            select_provider(config),
            offline=config.network_offline,
            breaker=CircuitBreaker(
                fail_threshold=config.network_circuit_fail_threshold,
                cooldown_sec=config.network_circuit_cooldown_sec
            )
        )

    def is_available(self) -> bool:
        return not self.offline and self.provider.is_available()

    async def stream_completion(
        self,
        messages: List[Dict[str, str]],
        on_chunk: OnChunk,
        on_finish: OnFinish,
        on_error: OnError
    ) -> None:
        """Forward to the wrapped provider unless offline or the breaker is open."""
        if self.offline:
            on_error(ProviderConnectionError("AI is in offline mode"))
            return
        if not self.breaker.should_attempt():
            on_error(ProviderConnectionError(f"Circuit breaker is OPEN for {self.name}"))
            return

        def finished():
            self.breaker.record_success()
            on_finish()

        def failed(error: BaseException):
            self.breaker.record_failure()
            on_error(error)

        await self.provider.stream_completion(messages, on_chunk, finished, failed)
