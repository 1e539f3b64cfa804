"""Exception classes for helprender.

Provides the error taxonomy used while rendering documentation trees.
None of these are fatal to a normal render: the renderer catches them at the
node boundary and degrades the offending fragment.
"""

from __future__ import annotations


class HelpRenderError(Exception):
    """Base exception for all helprender errors.
    
    Subclass this for specific error categories.
    """

    pass


class UnknownTagError(HelpRenderError):
    """A node carries a tag with no registered rendering rule.
    
    Recoverable: the node is rendered in its raw tagged form.
    """

    def __init__(self, tag: str) -> None:
        """Initialize unknown tag error.
        
        Args:
            tag: The unregistered tag
        """
        self.tag = tag
        super().__init__(f"No rendering rule for tag {tag!r}")


class MalformedNodeError(HelpRenderError):
    """A node's text or children do not match the shape its tag requires.
    
    Recoverable at the node boundary: the subtree is skipped and its
    siblings render normally.
    """

    def __init__(self, tag: str, message: str) -> None:
        """Initialize malformed node error.
        
        Args:
            tag: Tag of the offending node (e.g., "METHOD")
            message: Description of the shape violation
        """
        self.tag = tag
        super().__init__(f"Malformed {tag} node: {message}")


class OracleUnavailable(HelpRenderError):
    """The symbol oracle could not answer a query.

    Never propagated into a render; treated as an empty answer.
    """

    pass


class ResourceNotFound(HelpRenderError):
    """A referenced resource (image, topic, file) does not exist."""

    def __init__(self, resource: str, message: str | None = None) -> None:
        self.resource = resource
        super().__init__(message or f"Resource not found: {resource}")


class TopicNotFoundError(ResourceNotFound):
    """No documentation topic is registered under the requested id."""

    def __init__(self, topic_id: str) -> None:
        self.topic_id = topic_id
        super().__init__(topic_id, f"Unknown topic: {topic_id!r}")


class TopicLoadError(HelpRenderError):
    """A topic file exists but does not hold a valid topic."""

    def __init__(self, path: str, reason: str) -> None:
        """Initialize topic load error.

        Args:
            path: Path of the offending topic file
            reason: What is wrong with it
        """
        self.path = path
        super().__init__(f"Invalid topic file {path}: {reason}")
