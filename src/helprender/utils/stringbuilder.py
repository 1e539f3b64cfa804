"""StringBuilder for O(n) text accumulation with tail inspection.

Appends to a list and joins once at the end. Unlike plain list-join
accumulation it also tracks the total length and can peek at the last few
characters, which the spacing rules need before every block boundary.

Thread Safety:
StringBuilder instances are owned by a single sink, and each sink is
written by exactly one render.

"""

from __future__ import annotations


class StringBuilder:
    """Efficient string accumulator.
    
    Usage:
            >>> sb = StringBuilder()
            >>> sb.append("Hello").append(" ").append("World")
            >>> sb.tail(2)
            'ld'
            >>> sb.build()
            'Hello World'
        
    """

    __slots__ = ("_parts", "_length")

    def __init__(self) -> None:
        """Initialize empty StringBuilder."""
        self._parts: list[str] = []
        self._length = 0

    def append(self, s: str) -> StringBuilder:
        """Append a string to the builder.

        Args:
            s: String to append (empty strings are skipped)

        Returns:
            self for method chaining
        """
        if s:
            self._parts.append(s)
            self._length += len(s)
        return self

    def tail(self, n: int) -> str:
        """Return the last ``n`` characters (fewer if the builder is shorter)."""
        if n <= 0:
            return ""
        pieces: list[str] = []
        needed = n
        for part in reversed(self._parts):
            if len(part) >= needed:
                pieces.append(part[-needed:])
                break
            pieces.append(part)
            needed -= len(part)
        return "".join(reversed(pieces))

    def replace_from(self, start: int, s: str) -> StringBuilder:
        """Replace everything from offset ``start`` to the end with ``s``.

        Only the parts after ``start`` are touched, so rewriting the end of
        a long output costs as much as the rewritten text.

        Args:
            start: Character offset (clamped to the current length)
            s: Replacement text

        Returns:
            self for method chaining
        """
        start = max(0, min(start, self._length))
        while self._parts and self._length - len(self._parts[-1]) >= start:
            self._length -= len(self._parts.pop())
        if self._length > start:
            last = self._parts.pop()
            self._length -= len(last)
            self.append(last[: start - self._length])
        return self.append(s)

    def slice_from(self, start: int) -> str:
        """Return the text from offset ``start`` to the end."""
        return self.tail(self._length - max(0, start))

    def build(self) -> str:
        """Join all parts into final string.

        Collapses the parts so repeated calls stay cheap.
        """
        if len(self._parts) > 1:
            self._parts = ["".join(self._parts)]
        return self._parts[0] if self._parts else ""

    def __len__(self) -> int:
        """Return the total number of characters."""
        return self._length
