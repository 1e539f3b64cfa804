"""HelpBrowser: open topics and follow links.

Ties a topic provider, a symbol oracle and a sink factory together. Every
``open`` builds a fresh RenderState and sink, so opening topics from several
threads never shares render state. History and navigation commands belong
to the host.

Example:
    >>> browser = HelpBrowser(provider, oracle)
    >>> sink = browser.open("Classes/SinOsc")
    >>> sink.activate(sink.links[0].start)   # follows the first link
"""

from __future__ import annotations

from collections.abc import Callable

from helprender.config import RenderConfig
from helprender.oracle import SymbolOracle, guard
from helprender.renderer import HelpRenderer
from helprender.sinks.text import TextSink
from helprender.state import RenderState
from helprender.topics import Topic, TopicProvider
from helprender.utils.logger import get_logger

logger = get_logger(__name__)


class HelpBrowser:
    """Render topics on demand.

    Args:
        provider: Resolves topic ids to documents
        oracle: Symbol knowledge source (None = knows nothing)
        sink_factory: Builds the sink for each opened topic
        config: Render configuration (None = context config)
        open_url: Called for external links
        open_file: Called for source-file buttons
    """

    __slots__ = ("_provider", "_oracle", "_sink_factory", "_renderer", "current", "current_topic")

    def __init__(
        self,
        provider: TopicProvider,
        oracle: SymbolOracle | None = None,
        *,
        sink_factory: Callable[[], TextSink] = TextSink,
        config: RenderConfig | None = None,
        open_url: Callable[[str], object] | None = None,
        open_file: Callable[[str], object] | None = None,
    ) -> None:
        self._provider = provider
        self._oracle = guard(oracle)
        self._sink_factory = sink_factory
        self._renderer = HelpRenderer(
            config=config, open_topic=self.open, open_url=open_url, open_file=open_file
        )
        self.current: TextSink | None = None
        self.current_topic: Topic | None = None

    def open(self, topic_id: str) -> TextSink:
        """Render ``topic_id`` into a new sink and make it current.

        Raises:
            TopicNotFoundError: If the provider has no such topic
            TopicLoadError: If the topic exists but cannot be loaded
        """
        topic = self._provider.open_topic(topic_id)
        logger.debug("Opening topic %s", topic_id)
        sink = self._sink_factory()
        state = RenderState(
            subject_class=topic.subject_class,
            subject_metaclass=topic.subject_metaclass,
            source_path=topic.source_path,
        )
        self._renderer.render(topic.tree, state, sink, self._oracle)
        self.current = sink
        self.current_topic = topic
        return sink


__all__ = ["HelpBrowser"]
