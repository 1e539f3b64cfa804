"""Topic providers: resolve a topic id to a renderable document.

A provider is the renderer's entry trigger. It is asked for a topic when
the host opens help for a symbol and again whenever an internal link is
activated.

JSON topic files (``JsonTopicProvider``) look like::

    {
      "subject_class": "SinOsc",
      "subject_metaclass": "Meta_SinOsc",
      "source": "Classes/SinOsc.schelp",
      "tree": {"tag": "DOCUMENT", "children": [...]}
    }

``source`` is resolved against the provider directory and used as the base
for relative image paths.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from helprender.errors import TopicLoadError, TopicNotFoundError
from helprender.nodes import DocNode
from helprender.serialization import from_dict
from helprender.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Topic:
    """A documentation unit ready to render."""

    topic_id: str
    source_path: Path | None
    subject_class: str | None
    subject_metaclass: str | None
    tree: DocNode


class TopicProvider(Protocol):
    """Protocol for topic sources."""

    def open_topic(self, topic_id: str) -> Topic:
        """Return the topic, or raise TopicNotFoundError."""
        ...


class MappingTopicProvider:
    """Topics held in memory."""

    __slots__ = ("_topics",)

    def __init__(self, topics: Mapping[str, Topic] | None = None) -> None:
        self._topics: dict[str, Topic] = dict(topics or {})

    def add(self, topic: Topic) -> None:
        self._topics[topic.topic_id] = topic

    def open_topic(self, topic_id: str) -> Topic:
        try:
            return self._topics[topic_id]
        except KeyError:
            raise TopicNotFoundError(topic_id) from None


class JsonTopicProvider:
    """Topics stored as ``<directory>/<topic_id>.json`` files.

    Topic ids may contain ``/`` (``Classes/SinOsc``) but may not escape the
    directory.
    """

    __slots__ = ("_root",)

    def __init__(self, directory: Path | str) -> None:
        self._root = Path(directory).resolve()

    def open_topic(self, topic_id: str) -> Topic:
        path = (self._root / f"{topic_id}.json").resolve()
        if not path.is_relative_to(self._root) or not path.is_file():
            raise TopicNotFoundError(topic_id)
        logger.debug("Loading topic %s from %s", topic_id, path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                msg = "topic file must hold a JSON object"
                raise ValueError(msg)
            if "tree" not in data:
                msg = "missing 'tree' field"
                raise ValueError(msg)
            tree = from_dict(data["tree"])
        except ValueError as e:
            raise TopicLoadError(str(path), str(e)) from e
        source = data.get("source")
        return Topic(
            topic_id=topic_id,
            source_path=self._root / source if source else path,
            subject_class=data.get("subject_class"),
            subject_metaclass=data.get("subject_metaclass"),
            tree=tree,
        )


__all__ = ["JsonTopicProvider", "MappingTopicProvider", "Topic", "TopicProvider"]
