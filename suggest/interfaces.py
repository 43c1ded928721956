"""Collaborator interfaces the engine depends on."""

from abc import abstractmethod
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

Cursor = Tuple[int, int]  # (1-based row, 0-based column)


class TimerHandle(Protocol):
    """Handle to a scheduled callback."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Schedules callbacks on the editor's event loop."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], Any]) -> Optional[TimerHandle]:
        """Run callback after delay seconds."""
        ...


class Editor(Protocol):
    """Buffer, window and overlay primitives of the host editor."""

    @abstractmethod
    def get_lines(self, buffer_id: str, start: int = 0, end: Optional[int] = None) -> List[str]:
        """Read lines [start, end) (0-based, end exclusive, None for the end)."""
        ...

    @abstractmethod
    def set_lines(self, buffer_id: str, start: int, end: int, lines: Sequence[str]) -> None:
        """Replace lines [start, end) (0-based, end exclusive) with lines."""
        ...

    @abstractmethod
    def get_cursor(self, buffer_id: str) -> Cursor:
        ...

    @abstractmethod
    def set_cursor(self, buffer_id: str, cursor: Cursor) -> None:
        ...

    @abstractmethod
    def is_insert_mode(self, buffer_id: str) -> bool:
        ...

    @abstractmethod
    def is_modifiable(self, buffer_id: str) -> bool:
        ...

    @abstractmethod
    def start_insert(self, buffer_id: str) -> None:
        """Leave the editor in an insert-equivalent state."""
        ...

    @abstractmethod
    def get_filetype(self, buffer_id: str) -> str:
        ...

    @abstractmethod
    def get_path(self, buffer_id: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_overlay(self, buffer_id: str, marks: Sequence[Any]) -> None:
        """Draw transient overlay marks; never changes buffer content."""
        ...

    @abstractmethod
    def clear_overlay(self, buffer_id: str) -> None:
        ...

    @abstractmethod
    def feedkeys(self, buffer_id: str, keys: str) -> None:
        """Re-dispatch a key to the editor's native handling."""
        ...
