"""Parse raw provider responses into validated suggestion sets.

The model is asked for a JSON array of suggestion sets, but what comes back
may be wrapped in reasoning tags, a ``<suggestions>`` block or markdown
fences, or surrounded by commentary. Cleanup here is targeted text trimming,
not a markdown parser.
"""

import json
import logging
import re
from typing import Any, List, Optional, Sequence

from core.errors import ResponseDecodeError
from suggest.models import SuggestionItem, SuggestionSet

logger = logging.getLogger(__name__)

THINK_RE = re.compile(r"<(think|thinking|reasoning)>.*?</\1>", re.DOTALL | re.IGNORECASE)
SUGGESTIONS_RE = re.compile(r"<suggestions>\s*(.*?)\s*</suggestions>", re.DOTALL)
FENCE_OPEN_RE = re.compile(r"^\s*```[\w+-]*[ \t]*\n", re.MULTILINE)
FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")
TRAILING_COMMA_RE = re.compile(r",(\s*[\]}])")
LINE_NUMBER_RE = re.compile(r"^L\d+: ")


def clean_response(text: str) -> str:
    """
    Strip wrappers and commentary around the JSON array in a model response.

    Args:
        text: Raw response text.

    Returns:
        The best-effort JSON array text (empty if no array is present).
    """
    text = THINK_RE.sub("", text)

    match = SUGGESTIONS_RE.search(text)
    if match:
        text = match.group(1)

    text = FENCE_OPEN_RE.sub("", text, count=1)
    text = FENCE_CLOSE_RE.sub("", text)

    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        return text.strip()
    return text[start:end + 1]


def _decode(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    # Models imitating the prompt example tend to leave trailing commas.
    try:
        return json.loads(TRAILING_COMMA_RE.sub(r"\1", text))
    except json.JSONDecodeError as e:
        raise ResponseDecodeError(f"Error while decoding suggestions: {e}", text=text) from e


def _as_row(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _field(raw: dict, snake: str, camel: str) -> Any:
    return raw[snake] if snake in raw else raw.get(camel)


def validate_item(raw: Any) -> bool:
    """Check that a decoded item carries usable content and row bounds."""
    if not isinstance(raw, dict):
        return False
    content = raw.get("content")
    start_row = _as_row(_field(raw, "start_row", "startRow"))
    end_row = _as_row(_field(raw, "end_row", "endRow"))
    return (
        isinstance(content, str)
        and start_row is not None
        and end_row is not None
        and 1 <= start_row <= end_row
    )


def trim_line_numbers(lines: List[str]) -> List[str]:
    """Remove "L{n}: " prefixes leaked from the numbered prompt."""
    return [LINE_NUMBER_RE.sub("", line, count=1) for line in lines]


def trim_matching_prefix(lines: List[str], start_row: int, current_lines: Sequence[str]) -> int:
    """
    Count leading suggestion lines already present verbatim in the buffer.

    Args:
        lines: Suggested lines.
        start_row: 1-based row the suggestion starts at.
        current_lines: Current buffer lines.

    Returns:
        Number of matching leading lines.
    """
    matched = 0
    for offset, line in enumerate(lines):
        row = start_row + offset
        if row > len(current_lines) or current_lines[row - 1] != line:
            break
        matched += 1
    return matched


def build_suggestion_set(raw_items: Any, current_lines: Sequence[str]) -> SuggestionSet:
    """
    Validate raw items and minimise them against the current buffer.

    Args:
        raw_items: One decoded candidate set.
        current_lines: Current buffer lines.

    Returns:
        Sorted, non-overlapping suggestion items (possibly empty).
    """
    if not isinstance(raw_items, list):
        logger.warning(f"Ignoring suggestion set of type {type(raw_items).__name__}")
        return []

    items: SuggestionSet = []
    for raw in raw_items:
        if not validate_item(raw):
            logger.warning(f"Provider returned malformed or invalid suggestion data: {raw!r:.200}")
            continue

        start_row = _as_row(_field(raw, "start_row", "startRow"))
        end_row = _as_row(_field(raw, "end_row", "endRow"))
        if start_row > len(current_lines) + 1:
            logger.warning(f"Dropping suggestion at row {start_row}: buffer has {len(current_lines)} lines")
            continue
        end_row = min(end_row, len(current_lines))
        lines = trim_line_numbers(raw["content"].split("\n"))

        matched = trim_matching_prefix(lines, start_row, current_lines)
        remaining = lines[matched:]
        if not remaining:
            logger.debug(f"Dropping suggestion at row {start_row}: already in buffer")
            continue
        content = "\n".join(remaining)
        if not content:
            logger.debug(f"Dropping suggestion at row {start_row}: no content")
            continue

        items.append(SuggestionItem(
            id=0,
            content=content,
            start_row=start_row + matched,
            end_row=end_row,
            original_start_row=start_row
        ))

    items.sort(key=lambda item: item.start_row)

    kept: SuggestionSet = []
    for item in items:
        if kept and item.original_start_row <= kept[-1].last_row:
            logger.warning(f"Dropping suggestion at row {item.original_start_row}: overlaps previous item")
            continue
        item.id = len(kept) + 1
        kept.append(item)
    return kept


def parse(raw_text: str, current_lines: Sequence[str]) -> List[SuggestionSet]:
    """
    Turn a raw model response into suggestion sets.

    Args:
        raw_text: Aggregated response text.
        current_lines: Current buffer lines used for prefix trimming.

    Returns:
        Non-empty suggestion sets; an empty list when there is nothing to suggest.

    Raises:
        ResponseDecodeError: If no JSON array can be decoded.
    """
    text = clean_response(raw_text or "")
    if not text:
        logger.info("No suggestions found")
        return []

    decoded = _decode(text)
    if decoded is None or decoded == []:
        logger.info("No suggestions found")
        return []
    if not isinstance(decoded, list):
        raise ResponseDecodeError("Expected a JSON array of suggestions", text=text)

    if not isinstance(decoded[0], list):
        decoded = [decoded]

    sets = [build_suggestion_set(raw_set, current_lines) for raw_set in decoded]
    return [s for s in sets if s]
