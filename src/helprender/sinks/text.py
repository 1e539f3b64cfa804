"""Plain-text reference sink.

Accumulates the rendering as plain text and records every interactive span
(links, buttons, images, code blocks) as a :class:`Region`, so a host can
map a cursor position back to what it points at.

Example:
    >>> sink = TextSink()
    >>> sink.emit_text("See ")
    >>> sink.emit_hyperlink("SinOsc", "Classes/SinOsc", print)
    >>> sink.text
    'See SinOsc'
    >>> sink.activate(5)
    Classes/SinOsc

"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

from helprender.errors import ResourceNotFound
from helprender.sinks.protocol import Region, RegionKind
from helprender.spacing import boundary_padding, fill_region, trailing_blank_count
from helprender.utils.logger import get_logger
from helprender.utils.stringbuilder import StringBuilder

logger = get_logger(__name__)


class TextSink:
    """Render target producing plain text plus a region index.

    Thread Safety:
        Written by a single render. Not safe to share between renders.
    """

    __slots__ = ("_sb", "_regions", "_images", "_code_blocks")

    def __init__(self, *, images: bool = False) -> None:
        """Initialize sink.

        Args:
            images: Accept inline images (rendered as ``[image: alt]``
                placeholders; the file must exist)
        """
        self._sb = StringBuilder()
        self._regions: list[Region] = []
        self._images = images
        self._code_blocks = 0

    # =========================================================================
    # OutputSink
    # =========================================================================

    @property
    def supports_images(self) -> bool:
        return self._images

    @property
    def position(self) -> int:
        return len(self._sb)

    def tail(self, n: int) -> str:
        return self._sb.tail(n)

    def emit_text(self, run: str, style: str | None = None) -> None:
        self._sb.append(run)

    def emit_boundary(self) -> None:
        self._strip_trailing_blanks()
        self._sb.append(boundary_padding(self._sb.tail(2)))

    def fresh_line(self) -> None:
        self._strip_trailing_blanks()
        tail = self._sb.tail(1)
        if tail and tail != "\n":
            self._sb.append("\n")

    def fill(self, start: int, width: int) -> None:
        if width < 1 or start >= len(self._sb):
            return
        # ``width`` characters of context decide the column the region starts at.
        lead = min(max(0, start), width)
        chunk = self._sb.slice_from(start - lead)
        filled = fill_region(chunk, lead, width)
        if filled != chunk:
            self._sb.replace_from(start, filled[lead:])

    def emit_hyperlink(
        self, label: str, target: str, on_activate: Callable[[str], object]
    ) -> None:
        self._add_region("link", label, target=target, on_activate=on_activate)

    def emit_button(
        self, label: str, payload: str, on_activate: Callable[[str], object]
    ) -> None:
        self._add_region("button", label, payload=payload, on_activate=on_activate)

    def emit_image(self, path: Path, alt_label: str) -> None:
        if not self._images:
            self._sb.append(alt_label)
            return
        if not path.is_file():
            raise ResourceNotFound(str(path))
        self._add_region("image", f"[image: {alt_label}]", target=str(path))

    def emit_code_block(self, code: str) -> Region:
        region = self._add_region("code", code, payload=code, index=self._code_blocks)
        self._code_blocks += 1
        return region

    # =========================================================================
    # Host-side queries
    # =========================================================================

    @property
    def text(self) -> str:
        """Rendered text so far."""
        return self._sb.build()

    @property
    def regions(self) -> tuple[Region, ...]:
        return tuple(self._regions)

    @property
    def links(self) -> tuple[Region, ...]:
        return tuple(r for r in self._regions if r.kind == "link")

    @property
    def buttons(self) -> tuple[Region, ...]:
        return tuple(r for r in self._regions if r.kind == "button")

    @property
    def code_blocks(self) -> tuple[Region, ...]:
        return tuple(r for r in self._regions if r.kind == "code")

    def region_at(self, position: int) -> Region | None:
        """Return the region covering ``position``, if any."""
        for region in self._regions:
            if position in region:
                return region
        return None

    def code_block_at(self, position: int) -> Region | None:
        """Return the code block covering ``position``, for execution requests."""
        region = self.region_at(position)
        return region if region is not None and region.kind == "code" else None

    def activate(self, position: int) -> object:
        """Activate the link or button under ``position``.

        Returns:
            Whatever the activation callback returns, or None when there is
            nothing activatable at ``position``
        """
        region = self.region_at(position)
        if region is None or region.kind not in ("link", "button"):
            logger.debug("Nothing to activate at %d", position)
            return None
        return region.activate()

    # =========================================================================
    # Helpers
    # =========================================================================

    def _add_region(
        self,
        kind: RegionKind,
        label: str,
        *,
        target: str | None = None,
        payload: str | None = None,
        on_activate: Callable[[str], object] | None = None,
        index: int = 0,
    ) -> Region:
        start = len(self._sb)
        self._sb.append(label)
        region = Region(
            kind=kind,
            start=start,
            end=len(self._sb),
            label=label,
            target=target,
            payload=payload,
            on_activate=on_activate,
            index=index,
        )
        self._regions.append(region)
        return region

    def _strip_trailing_blanks(self) -> None:
        """Drop trailing spaces/tabs that no region covers."""
        protected = self._regions[-1].end if self._regions else 0
        count = min(trailing_blank_count(self._sb.tail(64)), len(self._sb) - protected)
        if count > 0:
            self._sb.replace_from(len(self._sb) - count, "")
