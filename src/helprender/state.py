"""Per-render mutable state.

Thread Safety:
A RenderState is created fresh for every render and owned by that render
alone. Two topics rendered concurrently each get their own instance.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeAlias


class Bullets(Enum):
    """List modes without a counter."""

    NONE = "none"
    UNORDERED = "unordered"


@dataclass(frozen=True, slots=True)
class Ordered:
    """Numbered list mode; ``counter`` is the number of the next item."""

    counter: int = 1

    def __post_init__(self) -> None:
        if self.counter < 1:
            msg = f"Ordered list counter must be >= 1, got {self.counter}"
            raise ValueError(msg)

    def advance(self) -> Ordered:
        return Ordered(self.counter + 1)


BulletMode: TypeAlias = Bullets | Ordered


@dataclass(slots=True)
class RenderState:
    """Context threaded through one tree traversal.

    Attributes:
        bullet_mode: Current list numbering mode
        subject_class: Class the document describes, used to qualify
            class-method names and to query instance-method arguments
        subject_metaclass: Class-side owner for class-method argument queries
        source_path: Path of the source document; images resolve against
            its directory
    """

    bullet_mode: BulletMode = Bullets.NONE
    subject_class: str | None = None
    subject_metaclass: str | None = None
    source_path: Path | None = None

    @property
    def base_dir(self) -> Path | None:
        """Directory of the source document, if known."""
        return self.source_path.parent if self.source_path is not None else None

    def next_bullet(self, bullet: str = "* ") -> str:
        """Return the marker for the next list item and advance the counter.

        Returns an empty string outside of lists.
        """
        match self.bullet_mode:
            case Ordered(counter=counter):
                self.bullet_mode = self.bullet_mode.advance()
                return f"{counter}. "
            case Bullets.UNORDERED:
                return bullet
            case _:
                return ""
