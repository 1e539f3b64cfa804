"""Output sinks.

Sinks receive the rendering through the OutputSink protocol.

Available Sinks:
- TextSink: plain text with an index of links, buttons, images and
  executable code blocks

"""

from helprender.sinks.protocol import OutputSink, Region
from helprender.sinks.text import TextSink

__all__ = ["OutputSink", "Region", "TextSink"]
