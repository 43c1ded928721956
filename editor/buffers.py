"""In-memory buffers implementing the editor collaborator."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from suggest.interfaces import Cursor

logger = logging.getLogger(__name__)

NORMAL = "normal"
INSERT = "insert"


@dataclass
class BufferState:
    """State of a buffer."""
    path: Optional[Path]
    lines: List[str] = field(default_factory=lambda: [""])
    cursor: Cursor = (1, 0)
    mode: str = NORMAL
    modifiable: bool = True
    filetype: str = ""
    dirty: bool = False
    overlay: List[Any] = field(default_factory=list)
    fed_keys: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


FILETYPES = {
    ".py": "python",
    ".lua": "lua",
    ".js": "javascript",
    ".ts": "typescript",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".sh": "sh",
    ".md": "markdown",
    ".toml": "toml",
}


class BufferManager:
    """Manages multiple text buffers."""

    def __init__(self) -> None:
        self.buffers: Dict[str, BufferState] = {}

    def open(self, path: Path) -> str:
        """
        Open a file in a new buffer.

        Args:
            path: Path to the file.

        Returns:
            Buffer key.
        """
        key = str(path)
        if key not in self.buffers:
            try:
                text = path.read_text(encoding='utf-8')
            except FileNotFoundError:
                text = ""
            self.buffers[key] = BufferState(
                path=path,
                lines=text.split("\n") if text else [""],
                filetype=FILETYPES.get(path.suffix, "")
            )
        return key

    def create(self, key: str, text: str = "", filetype: str = "", path: Optional[Path] = None) -> str:
        """Create a scratch buffer with the given content."""
        self.buffers[key] = BufferState(
            path=path,
            lines=text.split("\n"),
            filetype=filetype
        )
        return key

    def get(self, key: str) -> Optional[BufferState]:
        return self.buffers.get(key)

    def text(self, key: str) -> str:
        return self._state(key).text

    def save(self, key: str) -> Path:
        """
        Write a buffer back to its file.

        Raises:
            ValueError: If the buffer has no path.
        """
        state = self._state(key)
        if state.path is None:
            raise ValueError(f"Buffer {key} has no file path")
        state.path.write_text(state.text, encoding='utf-8')
        state.dirty = False
        return state.path

    def set_mode(self, key: str, mode: str) -> None:
        self._state(key).mode = mode

    def _state(self, key: str) -> BufferState:
        state = self.buffers.get(key)
        if state is None:
            raise KeyError(f"Unknown buffer: {key}")
        return state

    # Editor collaborator

    def get_lines(self, buffer_id: str, start: int = 0, end: Optional[int] = None) -> List[str]:
        lines = self._state(buffer_id).lines
        return list(lines[start:end])

    def set_lines(self, buffer_id: str, start: int, end: int, lines: Sequence[str]) -> None:
        """
        Replace lines [start, end) with new lines.

        Writing past the end of the buffer pads it with empty lines first.
        """
        state = self._state(buffer_id)
        if not state.modifiable:
            raise ValueError(f"Buffer {buffer_id} is not modifiable")
        if start > len(state.lines):
            state.lines.extend([""] * (start - len(state.lines)))
        end = max(start, min(end, len(state.lines)))
        state.lines[start:end] = list(lines)
        if not state.lines:
            state.lines = [""]
        state.dirty = True

    def get_cursor(self, buffer_id: str) -> Cursor:
        return self._state(buffer_id).cursor

    def set_cursor(self, buffer_id: str, cursor: Cursor) -> None:
        state = self._state(buffer_id)
        row = min(max(1, cursor[0]), len(state.lines))
        col = min(max(0, cursor[1]), len(state.lines[row - 1]))
        state.cursor = (row, col)

    def is_insert_mode(self, buffer_id: str) -> bool:
        return self._state(buffer_id).mode == INSERT

    def is_modifiable(self, buffer_id: str) -> bool:
        return self._state(buffer_id).modifiable

    def start_insert(self, buffer_id: str) -> None:
        self._state(buffer_id).mode = INSERT

    def get_filetype(self, buffer_id: str) -> str:
        return self._state(buffer_id).filetype

    def get_path(self, buffer_id: str) -> Optional[str]:
        path = self._state(buffer_id).path
        return str(path) if path else None

    def set_overlay(self, buffer_id: str, marks: Sequence[Any]) -> None:
        self._state(buffer_id).overlay = list(marks)

    def clear_overlay(self, buffer_id: str) -> None:
        state = self.buffers.get(buffer_id)
        if state is not None:
            state.overlay = []

    def feedkeys(self, buffer_id: str, keys: str) -> None:
        logger.debug(f"Feeding {keys} to {buffer_id}")
        self._state(buffer_id).fed_keys.append(keys)
