"""Suggestion request metrics."""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional


SLOW_REQUEST_MS = 5000


@dataclass
class SuggestionMetrics:
    """Metrics for a single suggestion request."""
    buffer_id: str
    cache_hit: bool
    sets: int
    elapsed_ms: int
    response_chars: int
    success: bool
    timestamp: float = field(default_factory=time.time)

    @property
    def slow(self) -> bool:
        return self.elapsed_ms > SLOW_REQUEST_MS


class MetricsStore:
    """Bounded store of recent suggestion request metrics."""

    def __init__(self, max_entries: int = 20):
        self.max_entries = max_entries
        self.metrics: Deque[SuggestionMetrics] = deque(maxlen=max_entries)

    def add(self, metric: SuggestionMetrics) -> None:
        """Add a request metric."""
        self.metrics.append(metric)

    def get_recent(self, count: int = 5) -> List[SuggestionMetrics]:
        """Get the most recent metrics."""
        return list(self.metrics)[-count:]

    def get_latest(self) -> Optional[SuggestionMetrics]:
        """Get the latest metric."""
        return self.metrics[-1] if self.metrics else None

    def hit_ratio(self) -> float:
        """Share of recorded requests served from the cache."""
        if not self.metrics:
            return 0.0
        return sum(1 for m in self.metrics if m.cache_hit) / len(self.metrics)

    def summary(self) -> str:
        """One-line status summary of the latest request."""
        latest = self.get_latest()
        if latest is None:
            return "no suggestions yet"
        source = "cache" if latest.cache_hit else "provider"
        status = "ok" if latest.success else "failed"
        return (f"{status} via {source} | sets:{latest.sets} | "
                f"{latest.response_chars:,} chars | {latest.elapsed_ms}ms")
