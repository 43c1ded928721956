"""Content-addressed cache of raw suggestion payloads with TTL and LRU-by-size eviction."""

import hashlib
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from core.errors import CacheFailure
from suggest.models import EditContext

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY_BYTES = 50 * 1024 * 1024
DEFAULT_TTL_SEC = 300
# Only the tail of the document is hashed; distant edits in very large
# files can share a key when their trailing windows coincide.
KEY_WINDOW_CHARS = 2000


@dataclass
class CacheEntry:
    """A cached provider payload."""
    key: str
    payload: str
    last_accessed_at: float
    expires_at: float
    size_bytes: int


class SuggestionCache:
    """Process-lifetime suggestion cache shared by all buffers."""

    def __init__(
        self,
        capacity_bytes: int = DEFAULT_CAPACITY_BYTES,
        ttl_sec: float = DEFAULT_TTL_SEC,
        clock: Callable[[], float] = time.monotonic
    ):
        self.capacity_bytes = capacity_bytes
        self.ttl_sec = ttl_sec
        self.clock = clock
        # Iteration order is access order, so ties on last_accessed_at evict the staler entry.
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._size_bytes = 0

    @staticmethod
    def generate_key(context: EditContext) -> str:
        """
        Fingerprint an edit context.

        Args:
            context: The edit context.

        Returns:
            "line:col:sha256" of the trailing document window.
        """
        window = context.text[-KEY_WINDOW_CHARS:]
        digest = hashlib.sha256(window.encode("utf-8")).hexdigest()
        return f"{context.cursor_line}:{context.cursor_col}:{digest}"

    def get(self, key: str) -> Optional[str]:
        """Return the cached payload, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        now = self.clock()
        if now >= entry.expires_at:
            self._remove(key)
            logger.debug(f"Cache entry expired: {key[:32]}")
            return None

        entry.last_accessed_at = now
        self._entries.move_to_end(key)
        return entry.payload

    def set(self, key: str, payload: str) -> None:
        """
        Store a payload, evicting least recently accessed entries to stay within capacity.

        Raises:
            CacheFailure: If the payload is not text.
        """
        if not isinstance(payload, str):
            raise CacheFailure(f"Cannot cache payload of type {type(payload).__name__}", key=key)
        try:
            size = len(payload.encode("utf-8"))
        except UnicodeEncodeError as e:
            raise CacheFailure(f"Cannot encode payload: {e}", key=key) from e

        if key in self._entries:
            self._remove(key)

        while self._entries and self._size_bytes + size > self.capacity_bytes:
            oldest_key = min(self._entries, key=lambda k: self._entries[k].last_accessed_at)
            logger.debug(f"Evicting cache entry: {oldest_key[:32]}")
            self._remove(oldest_key)

        now = self.clock()
        self._entries[key] = CacheEntry(
            key=key,
            payload=payload,
            last_accessed_at=now,
            expires_at=now + self.ttl_sec,
            size_bytes=size
        )
        self._size_bytes += size

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()
        self._size_bytes = 0

    def stats(self) -> Dict[str, int]:
        """Return entry count, resident size and capacity."""
        return {
            "count": len(self._entries),
            "size_bytes": self._size_bytes,
            "capacity_bytes": self.capacity_bytes
        }

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _remove(self, key: str) -> None:
        entry = self._entries.pop(key)
        self._size_bytes -= entry.size_bytes
