"""ContextVar-based render configuration for helprender.

Provides context-local configuration using Python's ContextVars (PEP 567).
A host sets it once; every renderer created in that context reads it.

Thread Safety:
    ContextVars are thread-local. Each thread has independent storage,
    so no locks are needed.

Usage:
    from helprender.config import RenderConfig, render_config_context

    with render_config_context(RenderConfig(fill_column=60)):
        sink = browser.open("Classes/SinOsc")

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Immutable render configuration.

    Attributes:
        fill_column: Column at which PROSE paragraphs are wrapped
        heading_marker: Repeated once per heading level before the label
        argument_indent: Literal marker emitted after an argument name and
            before a definition body
        bullet: Marker for unordered list items
        strict: Raise UnknownTagError/MalformedNodeError instead of
            degrading the offending fragment
        class_topic: Format string mapping a class name to its topic id

    """

    fill_column: int = 72
    heading_marker: str = "*"
    argument_indent: str = "    "
    bullet: str = "* "
    strict: bool = False
    class_topic: str = "Classes/{name}"

    @classmethod
    def from_dict(cls, config_dict: dict) -> "RenderConfig":
        """Create RenderConfig from dictionary.

        Only includes keys that are valid RenderConfig fields; unknown keys
        are silently ignored.

        Example:
            >>> config = RenderConfig.from_dict({"fill_column": 60, "colour": "red"})
            >>> config.fill_column
            60

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)

    def class_topic_for(self, name: str) -> str:
        return self.class_topic.format(name=name)


_DEFAULT_CONFIG: RenderConfig = RenderConfig()

_render_config: ContextVar[RenderConfig] = ContextVar(
    "render_config",
    default=_DEFAULT_CONFIG,
)


def get_render_config() -> RenderConfig:
    """Get current render configuration (context-local)."""
    return _render_config.get()


def set_render_config(config: RenderConfig) -> None:
    """Set render configuration for the current context."""
    _render_config.set(config)


def reset_render_config() -> None:
    """Reset to the module-level default configuration."""
    _render_config.set(_DEFAULT_CONFIG)


@contextmanager
def render_config_context(config: RenderConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Restores the previous config even if an exception is raised.

    Example:
        >>> with render_config_context(RenderConfig(strict=True)):
        ...     get_render_config().strict
        True

    """
    previous = _render_config.get()
    _render_config.set(config)
    try:
        yield
    finally:
        _render_config.set(previous)


__all__ = [
    "RenderConfig",
    "get_render_config",
    "render_config_context",
    "reset_render_config",
    "set_render_config",
]
