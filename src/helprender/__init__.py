"""
helprender: render documentation trees into interactive rich text.

Takes a pre-parsed documentation tree (tagged nodes for headings, sections,
method signatures, lists, code blocks, images and inline markup) and renders
it into an output sink, resolving method signatures, superclass chains and
cross-document titles from a symbol oracle along the way.

Quick Start:
    >>> from helprender import make_document, node, render_text, Tag
    >>> doc = make_document(
    ...     "SinOsc",
    ...     "Sine oscillator",
    ...     (node(Tag.DESCRIPTION, None, node(Tag.PROSE, None, node(Tag.TEXT, "Hi."))),),
    ... )
    >>> print(render_text(doc))
    SinOsc
    <BLANKLINE>
    Sine oscillator
    <BLANKLINE>
    * Description
    <BLANKLINE>
    Hi.
    <BLANKLINE>
    <BLANKLINE>

    >>> # Or browse topics, following links between them
    >>> from helprender import HelpBrowser, MappingTopicProvider
    >>> browser = HelpBrowser(MappingTopicProvider(topics), oracle)
    >>> sink = browser.open("Classes/SinOsc")
"""

from helprender.browser import HelpBrowser
from helprender.config import (
    RenderConfig,
    get_render_config,
    render_config_context,
    reset_render_config,
    set_render_config,
)
from helprender.errors import (
    HelpRenderError,
    MalformedNodeError,
    OracleUnavailable,
    ResourceNotFound,
    TopicLoadError,
    TopicNotFoundError,
    UnknownTagError,
)
from helprender.nodes import DocNode, Tag, make_document, node
from helprender.oracle import (
    AsyncOracleAdapter,
    GuardedOracle,
    MethodArg,
    NullOracle,
    StaticOracle,
    SymbolOracle,
)
from helprender.renderer import RULES, HelpRenderer, render_document, render_text
from helprender.serialization import from_json, to_json
from helprender.sinks import OutputSink, Region, TextSink
from helprender.state import Bullets, Ordered, RenderState
from helprender.topics import JsonTopicProvider, MappingTopicProvider, Topic, TopicProvider

__version__ = "0.1.0"

__all__ = [
    "RULES",
    "AsyncOracleAdapter",
    "Bullets",
    "DocNode",
    "GuardedOracle",
    "HelpBrowser",
    "HelpRenderError",
    "HelpRenderer",
    "JsonTopicProvider",
    "MalformedNodeError",
    "MappingTopicProvider",
    "MethodArg",
    "NullOracle",
    "OracleUnavailable",
    "Ordered",
    "OutputSink",
    "Region",
    "RenderConfig",
    "RenderState",
    "ResourceNotFound",
    "StaticOracle",
    "SymbolOracle",
    "Tag",
    "TextSink",
    "Topic",
    "TopicLoadError",
    "TopicNotFoundError",
    "TopicProvider",
    "UnknownTagError",
    "from_json",
    "get_render_config",
    "make_document",
    "node",
    "render_config_context",
    "render_document",
    "render_text",
    "reset_render_config",
    "set_render_config",
    "to_json",
]
