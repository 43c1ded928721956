"""Tests for context window chunking."""

import types

import pytest

from core.errors import InvalidInput, ProcessingError
from suggest.chunker import build_context, context_window, join_chunks


def numbered(count):
    return [f"line {i}" for i in range(1, count + 1)]


class TestContextWindow:
    """Test window placement around the cursor."""

    def test_small_document(self):
        assert context_window(10, 5, 1000) == (1, 10)

    def test_centred_on_cursor(self):
        assert context_window(5000, 2500, 1000) == (2000, 2999)

    def test_near_end_slides_back(self):
        """Test that the window keeps its length near the document end."""
        assert context_window(5000, 4990, 1000) == (4001, 5000)

    def test_cursor_clamped(self):
        assert context_window(10, 99, 4) == (7, 10)


class TestBuildContext:
    """Test chunk generation."""

    def test_lazy_chunks(self):
        """Test that chunks are produced lazily and in order."""
        chunks = build_context(numbered(10), 1, max_context_lines=10, chunk_size=4)
        assert isinstance(chunks, types.GeneratorType)
        assert list(chunks) == [
            "line 1\nline 2\nline 3\nline 4",
            "line 5\nline 6\nline 7\nline 8",
            "line 9\nline 10",
        ]

    def test_line_numbers(self):
        """Test that line numbers use document rows."""
        chunks = list(build_context(numbered(3000), 1500, max_context_lines=4, chunk_size=2, line_numbers=True))
        assert chunks == ["L1498: line 1498\nL1499: line 1499", "L1500: line 1500\nL1501: line 1501"]

    def test_join_chunks(self):
        chunks = build_context(numbered(3), 1, max_context_lines=3, chunk_size=2)
        assert join_chunks(chunks) == "line 1\nline 2\n\nline 3"

    def test_invalid_sizes_use_defaults(self):
        """Test that non-positive sizes fall back to defaults."""
        chunks = list(build_context(numbered(5), 1, max_context_lines=0, chunk_size=-3))
        assert chunks == ["\n".join(numbered(5))]

    def test_empty_document(self):
        with pytest.raises(InvalidInput):
            build_context([], 1)

    def test_bad_line_raises_processing_error(self):
        """Test that non-text lines fail while chunking."""
        chunks = build_context(["ok", None], 1, max_context_lines=10, chunk_size=10)
        with pytest.raises(ProcessingError):
            list(chunks)
