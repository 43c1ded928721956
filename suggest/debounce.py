"""Debounce and throttle gate for suggestion requests."""

import asyncio
import logging
import time
from typing import Any, Callable, Optional

from suggest.interfaces import Cursor, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_TOLERANCE = 5


class AsyncioScheduler:
    """Scheduler backed by the asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop

    def call_later(self, delay: float, callback: Callable[[], Any]) -> Optional[TimerHandle]:
        loop = self.loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.debug("No running event loop, dropping scheduled callback")
                return None
        return loop.call_later(delay, callback)


class DebounceController:
    """
    Decides when an edit signal turns into a suggestion request.

    Every signal replaces the pending timer, so only the last signal inside the
    debounce interval fires. On fire the cursor must still be on the signalled
    line within the column tolerance, and no request may have fired inside the
    throttle window.
    """

    def __init__(
        self,
        callback: Callable[[Cursor], Any],
        interval_ms: int,
        throttle_ms: Optional[int] = None,
        column_tolerance: int = DEFAULT_COLUMN_TOLERANCE,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
        cursor_getter: Optional[Callable[[], Cursor]] = None
    ):
        self.callback = callback
        self.interval_ms = max(0, interval_ms)
        self.throttle_ms = self.interval_ms if throttle_ms is None else max(0, throttle_ms)
        self.column_tolerance = column_tolerance
        self.scheduler = scheduler or AsyncioScheduler()
        self.clock = clock
        self.cursor_getter = cursor_getter

        self.last_cursor: Optional[Cursor] = None
        self._handle: Optional[TimerHandle] = None
        self._throttled_until = 0.0

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def throttled(self) -> bool:
        return self.clock() < self._throttled_until

    def on_edit_signal(self, cursor: Cursor) -> None:
        """Record the cursor and (re)start the debounce timer."""
        self.cancel()
        self.last_cursor = cursor
        try:
            self._handle = self.scheduler.call_later(self.interval_ms / 1000, self._fire)
        except Exception as e:
            logger.debug(f"Failed to schedule suggestion: {e}")
            self._handle = None

    def cancel(self) -> None:
        """Cancel the pending timer, if any."""
        handle, self._handle = self._handle, None
        if handle is not None:
            try:
                handle.cancel()
            except Exception as e:
                logger.debug(f"Failed to cancel suggestion timer: {e}")

    def reset(self) -> None:
        """Cancel pending work and forget the cursor and throttle window."""
        self.cancel()
        self.last_cursor = None
        self._throttled_until = 0.0

    def _cursor_is_stable(self, cursor: Cursor) -> bool:
        if self.last_cursor is None:
            return False
        if self.cursor_getter is None:
            return True
        try:
            current = self.cursor_getter()
        except Exception as e:
            logger.debug(f"Cursor lookup failed: {e}")
            return False
        return (current[0] == cursor[0]
                and abs(current[1] - cursor[1]) < self.column_tolerance)

    def _fire(self) -> None:
        self._handle = None
        cursor = self.last_cursor
        if cursor is None or not self._cursor_is_stable(cursor):
            logger.debug("Cursor moved since last edit, skipping suggestion")
            return
        if self.throttled:
            logger.debug("Suggestion throttled")
            return

        self._throttled_until = self.clock() + self.throttle_ms / 1000
        self.callback(cursor)
