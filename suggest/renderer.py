"""Project the selected suggestion set onto the buffer as transient overlay marks."""

import difflib
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from suggest.interfaces import Cursor, Editor
from suggest.models import SuggestionItem, SuggestionSet

logger = logging.getLogger(__name__)

SUGGESTION_STYLE = "suggestion"
TO_BE_DELETED_STYLE = "to_be_deleted"


@dataclass(frozen=True)
class GhostText:
    """
    Suggested text anchored at a buffer row.

    inline is drawn on the anchor row starting at col; block_lines are virtual
    lines drawn below the anchor row (or above it when above is set).
    """
    item_id: int
    row: int
    col: int = 0
    inline: Optional[str] = None
    block_lines: List[str] = field(default_factory=list)
    above: bool = False


@dataclass(frozen=True)
class DeletionHighlight:
    """A buffer row that the suggestion will replace."""
    item_id: int
    row: int
    end_col: int


def inline_split(existing: str, proposed: str) -> Optional[int]:
    """
    Find where typed text ends and ghost text begins on the cursor row.

    Args:
        existing: Current buffer line.
        proposed: First suggested line.

    Returns:
        Column in the proposed line where ghost text starts, or None when the
        lines share nothing and the item renders as a block.
    """
    if proposed.startswith(existing):
        return len(existing)

    matcher = difflib.SequenceMatcher(None, existing, proposed, autojunk=False)
    for tag, _i1, _i2, j1, _j2 in matcher.get_opcodes():
        if tag != "equal":
            return j1 if j1 > 0 else None
    return None


class Renderer:
    """Computes overlay marks and hands them to the editor; never edits the buffer."""

    def __init__(self, editor: Optional[Editor] = None):
        self.editor = editor
        self.marks: Dict[str, list] = {}

    def layout_item(self, item: SuggestionItem, buffer_lines: Sequence[str], cursor: Cursor) -> list:
        """Compute the overlay marks for one item."""
        lines = item.lines
        cursor_row = cursor[0]
        col = 0

        if (item.start_row == item.end_row == cursor_row
                and item.start_row <= len(buffer_lines) and lines):
            split = inline_split(buffer_lines[item.start_row - 1], lines[0])
            if split:
                col = split

        marks: list = []
        if col > 0:
            marks.append(GhostText(
                item_id=item.id,
                row=item.start_row,
                col=col,
                inline=lines[0][col:],
                block_lines=lines[1:]
            ))
        elif item.start_row > 1:
            marks.append(GhostText(item_id=item.id, row=item.start_row - 1, block_lines=lines))
        else:
            marks.append(GhostText(item_id=item.id, row=1, block_lines=lines, above=True))

        for row in range(item.start_row, item.end_row + 1):
            if row > len(buffer_lines):
                break
            if row == item.start_row and col > 0:
                continue
            marks.append(DeletionHighlight(item_id=item.id, row=row, end_col=len(buffer_lines[row - 1])))
        return marks

    def layout(self, active_set: SuggestionSet, buffer_lines: Sequence[str], cursor: Cursor) -> list:
        """Compute overlay marks for a whole set."""
        marks: list = []
        for item in active_set:
            marks.extend(self.layout_item(item, buffer_lines, cursor))
        return marks

    def render(self, buffer_id: str, active_set: SuggestionSet, buffer_lines: Sequence[str], cursor: Cursor) -> list:
        """
        Replace the buffer's overlay with the given set.

        Args:
            buffer_id: Target buffer.
            active_set: Selected suggestion set.
            buffer_lines: Snapshot of buffer lines.
            cursor: Cursor position.

        Returns:
            The marks drawn.
        """
        self.clear(buffer_id)
        marks = self.layout(active_set, buffer_lines, cursor)
        if not marks:
            return marks
        self.marks[buffer_id] = marks
        if self.editor is not None:
            self.editor.set_overlay(buffer_id, marks)
        logger.debug(f"Rendered {len(marks)} overlay marks in {buffer_id}")
        return marks

    def clear(self, buffer_id: str) -> None:
        """Remove every overlay mark from the buffer."""
        self.marks.pop(buffer_id, None)
        if self.editor is not None:
            self.editor.clear_overlay(buffer_id)

    def is_visible(self, buffer_id: str) -> bool:
        return bool(self.marks.get(buffer_id))
