"""Ghost text rendering for prompt_toolkit."""

from typing import Dict, List, Sequence

from prompt_toolkit.formatted_text import FormattedText

from suggest.renderer import SUGGESTION_STYLE, TO_BE_DELETED_STYLE, DeletionHighlight, GhostText


class GhostTextRenderer:
    """Renders buffer lines with suggestion overlay marks."""

    def __init__(self, styles: Dict[str, str] = None):
        self.styles = styles or self._get_styles()

    def _get_styles(self) -> Dict[str, str]:
        """Get style mapping for overlay kinds."""
        return {
            SUGGESTION_STYLE: "fg:#6A9955 italic",  # Dim green
            TO_BE_DELETED_STYLE: "fg:#D16969 strike",
            "text": ""
        }

    def render(self, lines: Sequence[str], marks: Sequence[object]) -> FormattedText:
        """
        Render lines with ghost text and deletion highlights.

        Args:
            lines: Buffer lines.
            marks: Overlay marks from the suggestion renderer.

        Returns:
            Formatted text ready for print_formatted_text or a Window.
        """
        ghost = self.styles[SUGGESTION_STYLE]
        deleted = self.styles[TO_BE_DELETED_STYLE]
        text = self.styles["text"]

        inline: Dict[int, GhostText] = {}
        below: Dict[int, List[str]] = {}
        above: List[str] = []
        deletions = set()

        for mark in marks:
            if isinstance(mark, DeletionHighlight):
                deletions.add(mark.row)
            elif isinstance(mark, GhostText):
                if mark.inline is not None:
                    inline[mark.row] = mark
                    below.setdefault(mark.row, []).extend(mark.block_lines)
                elif mark.above:
                    above.extend(mark.block_lines)
                else:
                    below.setdefault(mark.row, []).extend(mark.block_lines)

        fragments = []
        for line in above:
            fragments.append((ghost, line + "\n"))

        for row, line in enumerate(lines, start=1):
            mark = inline.get(row)
            if mark is not None:
                fragments.append((text, line[:mark.col]))
                fragments.append((ghost, mark.inline))
                fragments.append((text, "\n"))
            elif row in deletions:
                fragments.append((deleted, line))
                fragments.append((text, "\n"))
            else:
                fragments.append((text, line + "\n"))

            for block_line in below.get(row, []):
                fragments.append((ghost, block_line + "\n"))

        return FormattedText(fragments)
