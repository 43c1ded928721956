"""Commit suggestion items into the real buffer."""

import logging
from dataclasses import dataclass

from suggest.interfaces import Cursor, Editor
from suggest.models import SuggestionItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppliedEdit:
    """Bookkeeping for one committed item."""
    start_row: int
    replaced_count: int
    inserted_count: int
    cursor: Cursor

    @property
    def delta(self) -> int:
        """Net change in buffer line count."""
        return self.inserted_count - self.replaced_count


class Applier:
    """The only component that writes buffer content."""

    def apply(self, item: SuggestionItem, editor: Editor, buffer_id: str) -> AppliedEdit:
        """
        Replace the item's rows with its content and move the cursor after it.

        Args:
            item: Item to commit.
            editor: Editor collaborator.
            buffer_id: Target buffer.

        Returns:
            The applied edit.
        """
        lines = item.lines
        replaced_count = item.replaced_count
        first = item.start_row - 1

        if replaced_count > len(lines):
            # Shrinking: drop the surplus rows first, then overwrite the rest.
            logger.debug(f"Deleting rows {first + len(lines) + 1}-{item.end_row}")
            editor.set_lines(buffer_id, first + len(lines), item.end_row, [])
            editor.set_lines(buffer_id, first, first + len(lines), lines)
        else:
            logger.debug(f"Replacing rows {item.start_row}-{item.end_row} with {len(lines)} lines")
            editor.set_lines(buffer_id, first, first + replaced_count, lines)

        cursor = (item.start_row + len(lines) - 1, len(lines[-1]))
        editor.set_cursor(buffer_id, cursor)
        editor.start_insert(buffer_id)

        return AppliedEdit(
            start_row=item.start_row,
            replaced_count=replaced_count,
            inserted_count=len(lines),
            cursor=cursor
        )
