"""Data model for suggestions."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple


class SuggestionState(Enum):
    """Per-buffer suggestion lifecycle states."""
    IDLE = "idle"
    FETCHING = "fetching"
    READY = "ready"


class AcceptOutcome(Enum):
    """What an accept request ended up doing."""
    APPLIED = "applied"
    JUMPED = "jumped"
    FALLBACK = "fallback"
    NOOP = "noop"


@dataclass(frozen=True)
class EditContext:
    """Cursor-relative view of a document used for caching and prompting."""
    buffer_id: str
    cursor_line: int  # 1-based
    cursor_col: int  # 0-based
    lines: Tuple[str, ...]
    filetype: str = ""
    path: Optional[str] = None

    @classmethod
    def build(
        cls,
        buffer_id: str,
        cursor: Tuple[int, int],
        lines: Sequence[str],
        filetype: str = "",
        path: Optional[str] = None
    ) -> "EditContext":
        """Snapshot a document and cursor into an immutable context."""
        return cls(
            buffer_id=buffer_id,
            cursor_line=cursor[0],
            cursor_col=cursor[1],
            lines=tuple(lines),
            filetype=filetype,
            path=path
        )

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass
class SuggestionItem:
    """
    One contiguous edit: replace rows start_row..end_row (1-based, inclusive) with content.

    When prefix trimming consumed every replaced row, start_row is greater than
    end_row and the item inserts its content before start_row.
    """
    id: int
    content: str
    start_row: int
    end_row: int
    original_start_row: int

    @property
    def lines(self) -> List[str]:
        return self.content.split("\n")

    @property
    def replaced_count(self) -> int:
        return max(0, self.end_row - self.start_row + 1)

    @property
    def last_row(self) -> int:
        """Last row the item touches or is anchored to."""
        return max(self.end_row, self.start_row)

    def contains_row(self, row: int) -> bool:
        """Whether the cursor on this row is considered inside the item."""
        return self.original_start_row - 1 <= row <= self.last_row

    def shift(self, delta: int) -> None:
        self.start_row += delta
        self.end_row += delta
        self.original_start_row += delta


SuggestionSet = List[SuggestionItem]


@dataclass
class SuggestionContext:
    """Suggestion state owned per buffer."""
    sets: List[SuggestionSet] = field(default_factory=list)
    current_index: int = 0
    previous_document: Optional[Tuple[str, ...]] = None
    state: SuggestionState = SuggestionState.IDLE
    request_id: int = 0
    internal_move: bool = False

    @property
    def current_set(self) -> Optional[SuggestionSet]:
        if not self.sets or not 0 <= self.current_index < len(self.sets):
            return None
        return self.sets[self.current_index]
