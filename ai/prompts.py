"""Prompt templates for suggestion requests."""

import json
from typing import Dict, List, Optional

SUGGESTION_SYSTEM_PROMPT = (
    "You are a code completion engine embedded in an editor. Given a file with "
    "numbered lines (\"L<row>: \") and the cursor position, propose edits near the "
    "cursor. Answer only with a JSON array wrapped in <suggestions></suggestions>: "
    "an array of alternative suggestion sets, each an array of objects with "
    "\"start_row\", \"end_row\" (1-based, inclusive, rows to replace) and "
    "\"content\" (replacement text without line numbers). Keep edits minimal and "
    "never overlap rows within one set."
)

EXAMPLE_CODE = """L1: def fib
L2:
L3: if __name__ == "__main__":
L4:     # just pass
L5:     pass
"""

EXAMPLE_POSITION = {"insertSpaces": True, "tabSize": 4, "indentSize": 4, "position": {"row": 1, "col": 7}}

EXAMPLE_SUGGESTIONS = [
    [
        {
            "start_row": 1,
            "end_row": 1,
            "content": "def fib(n):\n    if n < 2:\n        return n\n    return fib(n - 1) + fib(n - 2)"
        },
        {
            "start_row": 4,
            "end_row": 5,
            "content": "    fib(int(input()))"
        }
    ],
    [
        {
            "start_row": 1,
            "end_row": 1,
            "content": "def fib(n):\n    a, b = 0, 1\n    for _ in range(n):\n        yield a\n        a, b = b, a + b"
        },
        {
            "start_row": 4,
            "end_row": 5,
            "content": "    list(fib(int(input())))"
        }
    ]
]


def _code_message(filename: str, code: str, filetype: Optional[str] = None) -> Dict[str, str]:
    content = f"<filepath>{filename}</filepath>\n"
    if filetype:
        content += f"<filetype>{filetype}</filetype>\n"
    content += f"<code>{code}</code>"
    return {"role": "user", "content": content}


def _position_message(row: int, col: int, tab_size: int, insert_spaces: bool) -> Dict[str, str]:
    position = {
        "insertSpaces": insert_spaces,
        "tabSize": tab_size,
        "indentSize": tab_size,
        "position": {"row": row, "col": col}
    }
    return {"role": "user", "content": json.dumps(position)}


def build_suggestion_prompt(
    filename: str,
    code: str,
    row: int,
    col: int,
    filetype: Optional[str] = None,
    tab_size: int = 4,
    insert_spaces: bool = True
) -> List[Dict[str, str]]:
    """
    Build messages for an inline suggestion request.

    Args:
        filename: Display name of the file.
        code: Line-numbered context window.
        row: 1-based cursor row.
        col: 0-based cursor column.
        filetype: Optional language tag.
        tab_size: Indent width hint.
        insert_spaces: Whether indentation uses spaces.

    Returns:
        List of message dictionaries.
    """
    example = "<suggestions>\n" + json.dumps(EXAMPLE_SUGGESTIONS, indent=2) + "\n</suggestions>"
    return [
        {"role": "system", "content": SUGGESTION_SYSTEM_PROMPT},
        _code_message("example.py", EXAMPLE_CODE, "python"),
        {"role": "assistant", "content": "ok"},
        {"role": "user", "content": json.dumps(EXAMPLE_POSITION)},
        {"role": "assistant", "content": example},
        _code_message(filename, code, filetype),
        {"role": "assistant", "content": "ok"},
        _position_message(row, col, tab_size, insert_spaces),
    ]
