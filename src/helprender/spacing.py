"""Blank-line normalization and paragraph filling.

Structural blocks (headings, sections, code blocks) are separated from the
surrounding content by exactly one blank line, however the previous
emission ended. Both helpers here are pure functions over the output text,
so any sink can reuse them.

Example:
    >>> boundary_padding("Some text")
    '\\n\\n'
    >>> boundary_padding("Some text\\n")
    '\\n'
    >>> boundary_padding("Some text\\n\\n")
    ''
"""

from __future__ import annotations

_BLANKS = " \t"


def boundary_padding(tail: str) -> str:
    """Return the newlines needed to end the output on a blank line.

    Args:
        tail: The last two (or fewer) characters of the output

    Returns:
        ``""``, ``"\\n"`` or ``"\\n\\n"``. Empty output needs no padding, and
        appending the result then calling again always yields ``""``.
    """
    if not tail:
        return ""
    if tail[-1] != "\n":
        return "\n\n"
    if len(tail) < 2 or tail[-2] == "\n":
        return ""
    return "\n"


def trailing_blank_count(text: str) -> int:
    """Count trailing spaces and tabs."""
    return len(text) - len(text.rstrip(_BLANKS))


def fill_region(text: str, start: int, width: int) -> str:
    """Wrap ``text[start:]`` to ``width`` columns, in place.

    Only spaces are turned into newlines, so the result has the same length
    as the input and offsets of links or buttons inside the region remain
    valid. Words longer than ``width`` are left on their own line. Text
    before ``start`` is never changed, but its last line counts toward the
    column of the first wrapped line.

    Args:
        text: Full output text
        start: Offset where the region to fill begins
        width: Fill column (values below 1 disable filling)

    Returns:
        Text of the same length with the region wrapped
    """
    if width < 1 or start >= len(text):
        return text
    chars = list(text)
    line_start = text.rfind("\n", 0, start) + 1
    last_space = -1
    for i in range(start, len(chars)):
        ch = chars[i]
        if ch == "\n":
            line_start = i + 1
            last_space = -1
            continue
        if ch == " ":
            last_space = i
        if i - line_start >= width and last_space >= max(line_start, start):
            chars[last_space] = "\n"
            line_start = last_space + 1
            last_space = -1
    return "".join(chars)
