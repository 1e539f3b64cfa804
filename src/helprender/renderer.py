"""Node renderer: documentation tree to OutputSink.

A recursive, table-driven walk. Every :class:`Tag` has exactly one
:class:`Rule` in :data:`RULES` declaring the node shape it accepts and the
handler that renders it; the table is checked for completeness at import.

Degradation:
Rendering never aborts because of a single node. A tag with no rule is
rendered in its raw tagged form, and a node whose text or children do not
fit its rule is replaced by a short ``[malformed TAG]`` marker while its
siblings render normally. ``RenderConfig(strict=True)`` raises instead.

Thread Safety:
All per-render state lives in RenderState and RenderContext, created per
render() call. A HelpRenderer instance holds only configuration and
callbacks and can be shared.
"""

from __future__ import annotations

import re
import webbrowser
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath
from typing import TypeAlias

from helprender.config import RenderConfig, get_render_config
from helprender.errors import MalformedNodeError, ResourceNotFound, UnknownTagError
from helprender.nodes import DocNode, Tag
from helprender.oracle import GuardedOracle, SymbolOracle, guard
from helprender.sinks.protocol import OutputSink
from helprender.sinks.text import TextSink
from helprender.state import Bullets, BulletMode, Ordered, RenderState
from helprender.utils.logger import get_logger

logger = get_logger(__name__)

_URL_RE = re.compile(r"^(?:https?|ftp|file)://", re.IGNORECASE)


class TextShape(Enum):
    """Whether a tag's node carries literal text."""

    REQUIRED = "required"
    FORBIDDEN = "forbidden"
    OPTIONAL = "optional"


Handler: TypeAlias = "Callable[[HelpRenderer, DocNode, Rule, RenderContext], None]"


@dataclass(frozen=True, slots=True)
class Rule:
    """Rendering rule for one tag.

    Attributes:
        handler: Function rendering the node
        text: Text presence the node must satisfy
        children: Whether the node may have children
        only: Child tags allowed (None = any)
        label: Fixed label (section headings, admonition prefixes)
        level: Heading level
        style: Advisory style for text runs
        check: Extra shape validation, raising MalformedNodeError
    """

    handler: Handler
    text: TextShape = TextShape.OPTIONAL
    children: bool = True
    only: frozenset[str] | None = None
    label: str = ""
    level: int = 0
    style: str | None = None
    check: Callable[[DocNode], None] | None = None


@dataclass(slots=True)
class RenderContext:
    """Everything one render threads through the walk."""

    state: RenderState
    sink: OutputSink
    oracle: GuardedOracle
    config: RenderConfig


def _unbound_opener(kind: str) -> Callable[[str], None]:
    def opener(target: str) -> None:
        logger.warning("No %s opener configured; ignoring activation of %r", kind, target)

    return opener


def _ignore_local_link(target: str) -> None:
    # Anchors leave no mark in the output, so there is nowhere to jump to.
    logger.debug("Same-document link %r has no topic to open", target)


class HelpRenderer:
    """Render documentation trees into an OutputSink.

    Usage:
        >>> renderer = HelpRenderer(open_topic=browser.open)
        >>> sink = TextSink()
        >>> renderer.render(tree, RenderState(subject_class="SinOsc"), sink, oracle)
        >>> print(sink.text)

    Args:
        config: Overrides the context's RenderConfig
        open_topic: Called with a document id when an internal link is activated
        open_url: Called with a URL when an external link is activated
        open_file: Called with a path when a source-file button is activated
    """

    __slots__ = ("_config", "_open_topic", "_open_url", "_open_file")

    def __init__(
        self,
        *,
        config: RenderConfig | None = None,
        open_topic: Callable[[str], object] | None = None,
        open_url: Callable[[str], object] | None = None,
        open_file: Callable[[str], object] | None = None,
    ) -> None:
        self._config = config
        self._open_topic = open_topic or _unbound_opener("topic")
        self._open_url = open_url or webbrowser.open
        self._open_file = open_file or _unbound_opener("file")

    @property
    def config(self) -> RenderConfig:
        return self._config if self._config is not None else get_render_config()

    def render(
        self,
        node: DocNode,
        state: RenderState,
        sink: OutputSink,
        oracle: SymbolOracle | None = None,
    ) -> None:
        """Render ``node`` and its subtree into ``sink``.

        Raises:
            UnknownTagError, MalformedNodeError: only with ``strict`` config
        """
        ctx = RenderContext(state=state, sink=sink, oracle=guard(oracle), config=self.config)
        self._render_node(node, ctx)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _render_node(self, node: DocNode, ctx: RenderContext) -> None:
        try:
            rule = rule_for(node.tag)
            check_shape(node, rule)
            rule.handler(self, node, rule, ctx)
        except UnknownTagError as e:
            if ctx.config.strict:
                raise
            logger.warning("%s; rendering raw form", e)
            ctx.sink.emit_text(node.raw_form(), "unknown")
        except MalformedNodeError as e:
            if ctx.config.strict:
                raise
            logger.warning("%s; skipping subtree", e)
            ctx.sink.emit_text(f"[malformed {node.tag}]", "malformed")

    def _render_children(self, node: DocNode, ctx: RenderContext) -> None:
        for child in node.children:
            self._render_node(child, ctx)

    def _heading(self, label: str, level: int, ctx: RenderContext) -> None:
        sink = ctx.sink
        marker = ctx.config.heading_marker * level + " " if level else ""
        sink.emit_boundary()
        sink.emit_text(marker + label, "heading")
        sink.emit_boundary()

    # =========================================================================
    # Structure and header
    # =========================================================================

    def _render_structural(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        self._render_children(node, ctx)

    def _render_silent(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        pass

    def _render_header(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        self._render_children(node, ctx)
        if ctx.state.subject_class:
            self._render_class_banner(ctx.state.subject_class, ctx)

    def _render_class_banner(self, class_id: str, ctx: RenderContext) -> None:
        """Superclass chain and implementing file of the documented class."""
        sink, oracle = ctx.sink, ctx.oracle
        superclasses = oracle.lookup_superclasses(class_id)
        source_file = oracle.lookup_implementing_file(class_id)
        if superclasses:
            sink.fresh_line()
            sink.emit_text("Inherits from: ")
            for i, name in enumerate(superclasses):
                if i:
                    sink.emit_text(" : ")
                sink.emit_hyperlink(name, ctx.config.class_topic_for(name), self._open_topic)
            sink.fresh_line()
        if source_file:
            sink.fresh_line()
            sink.emit_text("Source: ")
            sink.emit_button(PurePath(source_file).name, source_file, self._open_file)
            sink.fresh_line()
        if superclasses or source_file:
            sink.emit_boundary()

    def _render_title(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        self._heading(node.text or "", 0, ctx)

    def _render_line(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        """Header line: optional fixed label, then the node text."""
        ctx.sink.fresh_line()
        ctx.sink.emit_text(rule.label + (node.text or ""), rule.style)
        ctx.sink.emit_boundary()

    def _render_related(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.fresh_line()
        ctx.sink.emit_text(rule.label)
        for i, child in enumerate(node.children):
            if i:
                ctx.sink.emit_text(", ")
            self._render_node(child, ctx)
        ctx.sink.emit_boundary()

    # =========================================================================
    # Sections and blocks
    # =========================================================================

    def _render_section(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        self._heading(rule.label or node.text or "", rule.level, ctx)
        self._render_children(node, ctx)

    def _render_prose(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        start = ctx.sink.position
        self._render_children(node, ctx)
        ctx.sink.fill(start, ctx.config.fill_column)
        ctx.sink.emit_boundary()

    def _render_text(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.emit_text(node.text or "", rule.style)

    def _render_teletype_block(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        sink = ctx.sink
        sink.emit_boundary()
        sink.emit_text(node.text or "", rule.style)
        sink.fresh_line()
        sink.emit_boundary()

    def _render_code_block(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.emit_boundary()
        ctx.sink.emit_code_block(node.text or "")
        ctx.sink.emit_boundary()

    def _render_nl(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.emit_boundary()

    def _render_admonition(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.fresh_line()
        ctx.sink.emit_text(rule.label + " ", rule.style)
        self._render_children(node, ctx)
        ctx.sink.fresh_line()

    # =========================================================================
    # Lists, definitions, tables
    # =========================================================================

    def _render_with_bullets(self, mode: BulletMode, node: DocNode, ctx: RenderContext) -> None:
        previous = ctx.state.bullet_mode
        ctx.state.bullet_mode = mode
        try:
            self._render_children(node, ctx)
        finally:
            ctx.state.bullet_mode = previous

    def _render_list(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        self._render_with_bullets(Bullets.UNORDERED, node, ctx)

    def _render_numbered_list(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        self._render_with_bullets(Ordered(1), node, ctx)

    def _render_item(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.fresh_line()
        ctx.sink.emit_text(ctx.state.next_bullet(ctx.config.bullet), rule.style)
        self._render_children(node, ctx)
        ctx.sink.fresh_line()

    def _render_term(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.fresh_line()
        self._render_children(node, ctx)
        ctx.sink.fresh_line()

    def _render_definition(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.emit_text(ctx.config.argument_indent)
        self._render_children(node, ctx)
        ctx.sink.emit_boundary()

    def _render_argument(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        if node.text:
            ctx.sink.emit_text(node.text, rule.style)
            ctx.sink.emit_text(ctx.config.argument_indent)
        self._render_children(node, ctx)
        ctx.sink.emit_boundary()

    def _render_table(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.emit_boundary()
        self._render_children(node, ctx)
        ctx.sink.emit_boundary()

    def _render_row(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        ctx.sink.fresh_line()
        for i, cell in enumerate(node.children):
            if i:
                ctx.sink.emit_text(" | ")
            self._render_node(cell, ctx)
        ctx.sink.fresh_line()

    # =========================================================================
    # References
    # =========================================================================

    def _render_link(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        document, anchor, title = _split_link(node.text or "")
        sink = ctx.sink
        target = f"{document}#{anchor}" if anchor else document
        if _URL_RE.match(document):
            sink.emit_hyperlink(title or target, target, self._open_url)
            return
        label = link_label(document, anchor, title, ctx.oracle)
        if not document:
            sink.emit_hyperlink(label, target, _ignore_local_link)
            return
        sink.emit_hyperlink(label, target, lambda _target: self._open_topic(document))

    def _render_image(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        path_text, _, title = (node.text or "").partition("#")
        label = title or path_text
        sink = ctx.sink
        if not sink.supports_images:
            sink.emit_text(label)
            return
        path = Path(path_text)
        base = ctx.state.base_dir
        if base is not None and not path.is_absolute():
            path = base / path
        try:
            sink.emit_image(path, label)
        except ResourceNotFound as e:
            logger.info("%s; showing label instead", e)
            sink.emit_text(label)

    # =========================================================================
    # Methods
    # =========================================================================

    def _render_method(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        names, body = node.children
        sink = ctx.sink
        sink.emit_boundary()
        for name_node in names.children:
            sink.fresh_line()
            sink.emit_text(self._signature(node, name_node.text or "", ctx), rule.style)
        sink.emit_boundary()
        self._render_node(body, ctx)

    def _signature(self, node: DocNode, name: str, ctx: RenderContext) -> str:
        """Method name line: qualified name plus argument list."""
        state = ctx.state
        if node.tag == Tag.METHOD:
            return name + (node.text or "")
        if node.tag == Tag.CMETHOD:
            shown = f"{state.subject_class}.{name}" if state.subject_class else name
            owner = state.subject_metaclass or state.subject_class
        else:
            shown = name
            owner = state.subject_class
        if not owner:
            return shown
        return shown + format_args(ctx.oracle.lookup_method_args(owner, name))

    def _render_method_names(self, node: DocNode, rule: Rule, ctx: RenderContext) -> None:
        raise MalformedNodeError(node.tag, "method names outside of a method")


# =============================================================================
# Helpers
# =============================================================================


def _split_link(text: str) -> tuple[str, str, str]:
    """Split ``document[#anchor[#title]]``; missing parts are empty."""
    parts = text.split("#", 2)
    parts += [""] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def link_label(document: str, anchor: str, title: str, oracle: GuardedOracle) -> str:
    """Visible label of an internal link.

    Precedence: explicit title, then the anchor of a same-document link,
    then the oracle's title for the target document, then the anchor, then
    the raw document id. An empty document with an empty anchor yields an
    empty label.
    """
    if title:
        return title
    if not document:
        return anchor
    return oracle.lookup_document_title(document) or anchor or document


def format_args(args: Iterable) -> str:
    """``(a, b: 2)``, or an empty string for no arguments."""
    formatted = [arg.format() for arg in args]
    if not formatted:
        return ""
    return "(" + ", ".join(formatted) + ")"


def _check_document(node: DocNode) -> None:
    tags = [child.tag for child in node.children]
    if tags != [Tag.HEADER, Tag.BODY]:
        raise MalformedNodeError(node.tag, f"expected HEADER and BODY, got {tags}")


def _check_method(node: DocNode) -> None:
    tags = [child.tag for child in node.children]
    if tags != [Tag.METHODNAMES, Tag.METHODBODY]:
        raise MalformedNodeError(node.tag, f"expected METHODNAMES and METHODBODY, got {tags}")
    for name in node.children[0].children:
        if name.tag != Tag.STRING or not name.text:
            raise MalformedNodeError(node.tag, f"method name must be a STRING, got {name.tag}")


def rule_for(tag: str) -> Rule:
    """Look up the rule for ``tag``.

    Raises:
        UnknownTagError: If the tag is not part of the vocabulary
    """
    try:
        return RULES[Tag(tag)]
    except ValueError:
        raise UnknownTagError(str(tag)) from None


def check_shape(node: DocNode, rule: Rule) -> None:
    """Validate ``node`` against ``rule``.

    Raises:
        MalformedNodeError: If text or children do not fit the rule
    """
    if rule.text is TextShape.REQUIRED and node.text is None:
        raise MalformedNodeError(node.tag, "missing text")
    if rule.text is TextShape.FORBIDDEN and node.text is not None:
        raise MalformedNodeError(node.tag, f"unexpected text {node.text!r}")
    if not rule.children and node.children:
        raise MalformedNodeError(node.tag, "unexpected children")
    if rule.only is not None:
        stray = [child.tag for child in node.children if child.tag not in rule.only]
        if stray:
            raise MalformedNodeError(node.tag, f"unexpected children {stray}")
    if rule.check is not None:
        rule.check(node)


_R = HelpRenderer
_REQ = TextShape.REQUIRED
_NONE = TextShape.FORBIDDEN


def _leaf(style: str) -> Rule:
    return Rule(_R._render_text, text=_REQ, children=False, style=style)


def _fixed(label: str, level: int) -> Rule:
    return Rule(_R._render_section, text=_NONE, label=label, level=level)


_SILENT = Rule(_R._render_silent)
_METHOD = Rule(_R._render_method, check=_check_method, style="method")

RULES: dict[Tag, Rule] = {
    Tag.DOCUMENT: Rule(_R._render_structural, text=_NONE, check=_check_document),
    Tag.HEADER: Rule(_R._render_header, text=_NONE),
    Tag.BODY: Rule(_R._render_structural, text=_NONE),
    Tag.TITLE: Rule(_R._render_title, text=_REQ, children=False),
    Tag.SUMMARY: Rule(_R._render_line, text=_REQ, children=False),
    Tag.CATEGORIES: Rule(_R._render_line, text=_REQ, children=False, label="Categories: "),
    Tag.RELATED: Rule(_R._render_related, label="See also: "),
    Tag.REDIRECT: _SILENT,
    Tag.CLASS: _SILENT,
    Tag.SECTION: Rule(_R._render_section, text=_REQ, level=1),
    Tag.SUBSECTION: Rule(_R._render_section, text=_REQ, level=2),
    Tag.DESCRIPTION: _fixed("Description", 1),
    Tag.EXAMPLES: _fixed("Examples", 1),
    Tag.CLASSMETHODS: _fixed("Class Methods", 1),
    Tag.INSTANCEMETHODS: _fixed("Instance Methods", 1),
    Tag.DISCUSSION: _fixed("Discussion", 2),
    Tag.RETURNS: _fixed("Returns", 3),
    Tag.PROSE: Rule(_R._render_prose),
    Tag.TEXT: _leaf("text"),
    Tag.SOFT: _leaf("text"),
    Tag.TELETYPE: _leaf("teletype"),
    Tag.CODE: _leaf("code"),
    Tag.STRONG: _leaf("strong"),
    Tag.EMPHASIS: _leaf("emphasis"),
    Tag.STRING: _leaf("string"),
    Tag.TELETYPEBLOCK: Rule(
        _R._render_teletype_block, text=_REQ, children=False, style="teletype"
    ),
    Tag.CODEBLOCK: Rule(_R._render_code_block, text=_REQ, children=False),
    Tag.NL: Rule(_R._render_nl, children=False),
    Tag.NOTE: Rule(_R._render_admonition, label="NOTE:", style="note"),
    Tag.WARNING: Rule(_R._render_admonition, label="WARNING:", style="warning"),
    Tag.LIST: Rule(_R._render_list, text=_NONE),
    Tag.TREE: Rule(_R._render_list, text=_NONE),
    Tag.NUMBEREDLIST: Rule(_R._render_numbered_list, text=_NONE),
    Tag.ITEM: Rule(_R._render_item, style="bullet"),
    Tag.DEFINITIONLIST: Rule(_R._render_structural, text=_NONE),
    Tag.TERM: Rule(_R._render_term),
    Tag.DEFINITION: Rule(_R._render_definition),
    Tag.TABLE: Rule(_R._render_table, text=_NONE, only=frozenset({Tag.ROW})),
    Tag.ROW: Rule(_R._render_row, text=_NONE, only=frozenset({Tag.CELL})),
    Tag.CELL: Rule(_R._render_structural),
    Tag.METHOD: _METHOD,
    Tag.CMETHOD: _METHOD,
    Tag.IMETHOD: _METHOD,
    Tag.METHODNAMES: Rule(_R._render_method_names),
    Tag.METHODBODY: Rule(_R._render_structural),
    Tag.ARGUMENTS: Rule(_R._render_structural, text=_NONE),
    Tag.ARGUMENT: Rule(_R._render_argument, style="argument"),
    Tag.LINK: Rule(_R._render_link, text=_REQ, children=False),
    Tag.IMAGE: Rule(_R._render_image, text=_REQ, children=False),
    Tag.ANCHOR: _SILENT,
    Tag.KEYWORD: _SILENT,
    Tag.PRIVATE: _SILENT,
    Tag.COPYMETHOD: _SILENT,
    Tag.CCOPYMETHOD: _SILENT,
    Tag.ICOPYMETHOD: _SILENT,
}


def _check_rules() -> None:
    missing = [tag.value for tag in Tag if tag not in RULES]
    if missing:
        msg = f"No rendering rule for tags: {', '.join(missing)}"
        raise RuntimeError(msg)


_check_rules()


def render_document(
    tree: DocNode,
    sink: OutputSink,
    oracle: SymbolOracle | None = None,
    *,
    subject_class: str | None = None,
    subject_metaclass: str | None = None,
    source_path: Path | None = None,
    config: RenderConfig | None = None,
    open_topic: Callable[[str], object] | None = None,
    open_url: Callable[[str], object] | None = None,
    open_file: Callable[[str], object] | None = None,
) -> None:
    """Render a whole tree into ``sink`` with a fresh RenderState."""
    state = RenderState(
        subject_class=subject_class,
        subject_metaclass=subject_metaclass,
        source_path=source_path,
    )
    renderer = HelpRenderer(
        config=config, open_topic=open_topic, open_url=open_url, open_file=open_file
    )
    renderer.render(tree, state, sink, oracle)


def render_text(tree: DocNode, oracle: SymbolOracle | None = None, **kwargs: object) -> str:
    """Render a tree to plain text.

    Example:
        >>> from helprender.nodes import make_document
        >>> render_text(make_document("SinOsc", "Sine oscillator"))
        'SinOsc\\n\\nSine oscillator\\n\\n'
    """
    sink = TextSink()
    render_document(tree, sink, oracle, **kwargs)  # type: ignore[arg-type]
    return sink.text


__all__ = [
    "RULES",
    "HelpRenderer",
    "RenderContext",
    "Rule",
    "TextShape",
    "check_shape",
    "format_args",
    "link_label",
    "render_document",
    "render_text",
    "rule_for",
]
