"""Tests for prompt_toolkit ghost text rendering."""

from prompt_toolkit.formatted_text import FormattedText, to_plain_text

from editor.ghost_text import GhostTextRenderer
from suggest.renderer import DeletionHighlight, GhostText


class TestGhostTextRenderer:
    """Test fragment generation from overlay marks."""

    def test_plain_lines(self):
        result = GhostTextRenderer().render(["a", "b"], [])
        assert isinstance(result, FormattedText)
        assert to_plain_text(result) == "a\nb\n"

    def test_inline_ghost_text(self):
        """Test that inline text follows the typed prefix with the ghost style."""
        renderer = GhostTextRenderer()
        marks = [GhostText(item_id=1, row=1, col=7, inline="(n):", block_lines=["    return n"])]
        result = renderer.render(["def fib", "x"], marks)

        ghost = renderer.styles["suggestion"]
        assert (ghost, "(n):") in list(result)
        assert (ghost, "    return n\n") in list(result)
        assert to_plain_text(result) == "def fib(n):\n    return n\nx\n"

    def test_block_and_deletions(self):
        """Test that replaced rows are struck and block lines follow the anchor."""
        renderer = GhostTextRenderer()
        marks = [
            GhostText(item_id=1, row=1, block_lines=["new"]),
            DeletionHighlight(item_id=1, row=2, end_col=3),
        ]
        result = list(renderer.render(["keep", "old"], marks))
        assert result == [
            ("", "keep\n"),
            (renderer.styles["suggestion"], "new\n"),
            (renderer.styles["to_be_deleted"], "old"),
            ("", "\n"),
        ]

    def test_above_first_row(self):
        renderer = GhostTextRenderer()
        marks = [GhostText(item_id=1, row=1, block_lines=["import os"], above=True)]
        result = renderer.render(["x = 1"], marks)
        assert to_plain_text(result) == "import os\nx = 1\n"

    def test_custom_styles(self):
        styles = {"suggestion": "fg:gray", "to_be_deleted": "fg:red", "text": ""}
        renderer = GhostTextRenderer(styles)
        result = renderer.render(["x"], [GhostText(item_id=1, row=1, col=1, inline="y")])
        assert ("fg:gray", "y") in list(result)
