"""Bounded context window extraction and chunking around the cursor."""

import logging
from typing import Iterable, Iterator, List, Sequence, Tuple

from core.errors import InvalidInput, ProcessingError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONTEXT_LINES = 1000
DEFAULT_CHUNK_SIZE = 200
CHUNK_SEPARATOR = "\n\n"


def _positive_or_default(value, default: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        logger.debug(f"Invalid {name}={value!r}, using {default}")
        return default
    return value


def context_window(line_count: int, cursor_line: int, max_context_lines: int) -> Tuple[int, int]:
    """
    Compute a window of at most max_context_lines rows centred on the cursor.

    Args:
        line_count: Number of lines in the document.
        cursor_line: 1-based cursor row.
        max_context_lines: Window length.

    Returns:
        1-based inclusive (start, end) rows clamped to the document.
    """
    cursor_line = min(max(cursor_line, 1), line_count)
    start = max(1, cursor_line - max_context_lines // 2)
    end = min(line_count, start + max_context_lines - 1)
    # Near the end of the document, slide back to keep the full length.
    start = max(1, min(start, end - max_context_lines + 1))
    return start, end


def build_context(
    lines: Sequence[str],
    cursor_line: int,
    max_context_lines: int = DEFAULT_MAX_CONTEXT_LINES,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    line_numbers: bool = False
) -> Iterator[str]:
    """
    Extract the context window around the cursor as a lazy sequence of chunks.

    Args:
        lines: Document lines.
        cursor_line: 1-based cursor row.
        max_context_lines: Window length; non-positive values use the default.
        chunk_size: Lines per chunk; non-positive values use the default.
        line_numbers: Prefix every line with "L{row}: ".

    Returns:
        Generator of chunk strings.

    Raises:
        InvalidInput: If the document is empty.
    """
    if not lines:
        raise InvalidInput("Buffer is empty")

    max_context_lines = _positive_or_default(max_context_lines, DEFAULT_MAX_CONTEXT_LINES, "max_context_lines")
    chunk_size = _positive_or_default(chunk_size, DEFAULT_CHUNK_SIZE, "chunk_size")

    start, end = context_window(len(lines), cursor_line, max_context_lines)
    return _iter_chunks(lines, start, end, chunk_size, line_numbers)


def _iter_chunks(lines: Sequence[str], start: int, end: int, chunk_size: int, line_numbers: bool) -> Iterator[str]:
    for chunk_start in range(start, end + 1, chunk_size):
        chunk_end = min(chunk_start + chunk_size - 1, end)
        chunk_lines: List[str] = list(lines[chunk_start - 1:chunk_end])
        if line_numbers:
            chunk_lines = [f"L{row}: {line}" for row, line in enumerate(chunk_lines, chunk_start)]
        try:
            text = "\n".join(chunk_lines)
        except TypeError as e:
            raise ProcessingError(
                "Failed to process file chunks",
                start_line=chunk_start,
                end_line=chunk_end,
                error=str(e)
            ) from e
        yield text


def join_chunks(chunks: Iterable[str]) -> str:
    """Rejoin chunks with a blank-line separator."""
    return CHUNK_SEPARATOR.join(chunks)
