"""Document tree nodes for helprender.

A documentation topic arrives as a tree of tagged nodes produced by an
external indexer. Every node has the same three fields:

- ``tag``: semantic role, normally a :class:`Tag` member
- ``text``: literal payload for leaf and mixed nodes, ``None`` for containers
- ``children``: ordered child nodes (possibly empty)

Tree shape:
DOCUMENT
├── HEADER
│   ├── TITLE "SinOsc"
│   ├── SUMMARY "Interpolating sine wavetable oscillator"
│   └── CATEGORIES / RELATED / CLASS / REDIRECT ...
└── BODY
    ├── DESCRIPTION
    │   └── PROSE (TEXT, LINK, CODE, ...)
    ├── CLASSMETHODS
    │   └── CMETHOD
    │       ├── METHODNAMES (STRING "ar", STRING "kr")
    │       └── METHODBODY (PROSE, ARGUMENTS, RETURNS, ...)
    └── EXAMPLES
        └── CODEBLOCK "{ SinOsc.ar(200) }.play"

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Tag(StrEnum):
    """Closed vocabulary of node tags understood by the renderer."""

    # Structure
    DOCUMENT = "DOCUMENT"
    HEADER = "HEADER"
    BODY = "BODY"

    # Header entries
    TITLE = "TITLE"
    SUMMARY = "SUMMARY"
    CATEGORIES = "CATEGORIES"
    RELATED = "RELATED"
    REDIRECT = "REDIRECT"
    CLASS = "CLASS"

    # Sections
    SECTION = "SECTION"
    SUBSECTION = "SUBSECTION"
    DESCRIPTION = "DESCRIPTION"
    EXAMPLES = "EXAMPLES"
    CLASSMETHODS = "CLASSMETHODS"
    INSTANCEMETHODS = "INSTANCEMETHODS"
    DISCUSSION = "DISCUSSION"
    RETURNS = "RETURNS"

    # Text
    PROSE = "PROSE"
    TEXT = "TEXT"
    SOFT = "SOFT"
    TELETYPE = "TELETYPE"
    CODE = "CODE"
    STRONG = "STRONG"
    EMPHASIS = "EMPHASIS"
    STRING = "STRING"
    TELETYPEBLOCK = "TELETYPEBLOCK"
    CODEBLOCK = "CODEBLOCK"
    NL = "NL"
    NOTE = "NOTE"
    WARNING = "WARNING"

    # Lists and tables
    LIST = "LIST"
    TREE = "TREE"
    NUMBEREDLIST = "NUMBEREDLIST"
    ITEM = "ITEM"
    DEFINITIONLIST = "DEFINITIONLIST"
    TERM = "TERM"
    DEFINITION = "DEFINITION"
    TABLE = "TABLE"
    ROW = "ROW"
    CELL = "CELL"

    # Methods
    METHOD = "METHOD"
    CMETHOD = "CMETHOD"
    IMETHOD = "IMETHOD"
    METHODNAMES = "METHODNAMES"
    METHODBODY = "METHODBODY"
    ARGUMENTS = "ARGUMENTS"
    ARGUMENT = "ARGUMENT"

    # References
    LINK = "LINK"
    IMAGE = "IMAGE"
    ANCHOR = "ANCHOR"
    KEYWORD = "KEYWORD"

    # Internal markers, never shown
    PRIVATE = "PRIVATE"
    COPYMETHOD = "COPYMETHOD"
    CCOPYMETHOD = "CCOPYMETHOD"
    ICOPYMETHOD = "ICOPYMETHOD"


@dataclass(frozen=True, slots=True)
class DocNode:
    """One node of a documentation tree.

    ``tag`` is typed as ``str`` rather than :class:`Tag` so that trees from a
    newer indexer can carry tags this renderer has never heard of; those are
    handled by the unknown-tag fallback instead of failing at load time.

    """

    tag: str
    text: str | None = None
    children: tuple[DocNode, ...] = ()

    def child(self, tag: str) -> DocNode | None:
        """Return the first direct child with ``tag``, if any."""
        for node in self.children:
            if node.tag == tag:
                return node
        return None

    def raw_form(self) -> str:
        """Debugging representation: ``(TAG "text" (CHILD ...) ...)``."""
        parts = [str(self.tag)]
        if self.text is not None:
            escaped = self.text.replace("\\", "\\\\").replace('"', '\\"')
            parts.append(f'"{escaped}"')
        parts.extend(child.raw_form() for child in self.children)
        return "(" + " ".join(parts) + ")"


def node(tag: str, text: str | None = None, *children: DocNode) -> DocNode:
    """Shorthand constructor: ``node(Tag.PROSE, None, node(Tag.TEXT, "hi"))``."""
    return DocNode(tag=tag, text=text, children=children)


def make_document(
    title: str,
    summary: str = "",
    body: tuple[DocNode, ...] = (),
    *,
    header: tuple[DocNode, ...] = (),
) -> DocNode:
    """Build a well-formed ``DOCUMENT`` tree.

    Args:
        title: Document title
        summary: One-line summary (omitted when empty)
        body: Top-level content nodes
        header: Extra header nodes (CATEGORIES, RELATED, CLASS, ...)

    Returns:
        ``DOCUMENT`` node with exactly a ``HEADER`` and a ``BODY`` child
    """
    head: list[DocNode] = [DocNode(Tag.TITLE, title)]
    if summary:
        head.append(DocNode(Tag.SUMMARY, summary))
    head.extend(header)
    return DocNode(
        Tag.DOCUMENT,
        None,
        (
            DocNode(Tag.HEADER, None, tuple(head)),
            DocNode(Tag.BODY, None, tuple(body)),
        ),
    )


__all__ = ["DocNode", "Tag", "make_document", "node"]
