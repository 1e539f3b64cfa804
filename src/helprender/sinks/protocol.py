"""OutputSink protocol: the renderer's only view of the display surface.

Any object implementing these methods can receive a rendering. The
built-in ``TextSink`` is the reference implementation.

Example:
    from helprender.sinks.protocol import OutputSink

    def render_into(sink: OutputSink, tree: DocNode) -> None:
        HelpRenderer().render(tree, RenderState(), sink, oracle)

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol, TypeAlias

RegionKind: TypeAlias = Literal["link", "button", "image", "code"]


@dataclass(frozen=True, slots=True)
class Region:
    """An addressable span of the output.

    Links and buttons carry an activation callback; code blocks carry their
    source in ``payload`` so a host can execute them later.

    Attributes:
        kind: What the span is
        start: Offset of the first character
        end: Offset one past the last character
        label: Visible text
        target: Link target identifier (links and images)
        payload: Button payload or code block source
        on_activate: Callback invoked with the target or payload
        index: Position among regions of the same kind (code blocks are
            addressed by it)

    """

    kind: RegionKind
    start: int
    end: int
    label: str
    target: str | None = None
    payload: str | None = None
    on_activate: Callable[[str], object] | None = None
    index: int = 0

    def __contains__(self, position: object) -> bool:
        return isinstance(position, int) and self.start <= position < self.end

    def activate(self) -> object:
        """Invoke the callback with the target (links) or payload (buttons)."""
        if self.on_activate is None:
            return None
        argument = self.target if self.kind == "link" else self.payload
        return self.on_activate(argument or "")


class OutputSink(Protocol):
    """Protocol for rendering destinations.

    ``style`` arguments are advisory; a plain-text sink may ignore them.

    """

    @property
    def supports_images(self) -> bool:
        """Whether ``emit_image`` can display images inline."""
        ...

    @property
    def position(self) -> int:
        """Current output offset."""
        ...

    def tail(self, n: int) -> str:
        """Last ``n`` characters of the output."""
        ...

    def emit_text(self, run: str, style: str | None = None) -> None:
        """Append a run of text."""
        ...

    def emit_boundary(self) -> None:
        """Ensure the output ends on exactly one blank line. Idempotent."""
        ...

    def fresh_line(self) -> None:
        """Start a new line unless already at the start of one."""
        ...

    def fill(self, start: int, width: int) -> None:
        """Wrap the output from ``start`` to the current position."""
        ...

    def emit_hyperlink(
        self, label: str, target: str, on_activate: Callable[[str], object]
    ) -> None:
        """Append a link; activation calls ``on_activate(target)``."""
        ...

    def emit_button(
        self, label: str, payload: str, on_activate: Callable[[str], object]
    ) -> None:
        """Append a button; activation calls ``on_activate(payload)``."""
        ...

    def emit_image(self, path: Path, alt_label: str) -> None:
        """Append an image. Raises ResourceNotFound if it cannot be loaded."""
        ...

    def emit_code_block(self, code: str) -> Region:
        """Append an executable code block and return its region."""
        ...
