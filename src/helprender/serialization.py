"""Tree serialization: JSON round-trip for documentation trees.

The indexer hands trees over as JSON; each node is a dict with ``tag``,
``text`` and ``children`` keys::

    {"tag": "LINK", "text": "Classes/SinOsc", "children": []}

``text`` and ``children`` may be omitted. All output is deterministic
(sorted keys).

Example:
    from helprender.serialization import to_json, from_json

    json_str = to_json(tree)
    assert from_json(json_str) == tree

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from typing import Any

from helprender.nodes import DocNode, Tag


def to_dict(node: DocNode) -> dict[str, Any]:
    """Convert a node and its subtree to a JSON-compatible dict."""
    return {
        "tag": str(node.tag),
        "text": node.text,
        "children": [to_dict(child) for child in node.children],
    }


def from_dict(data: dict[str, Any]) -> DocNode:
    """Reconstruct a node from a dict.

    Known tags become :class:`Tag` members; unknown tags are kept as plain
    strings so the renderer can apply its fallback.

    Raises:
        ValueError: If ``tag`` is missing or fields have the wrong type.

    """
    if not isinstance(data, dict):
        msg = f"Serialized node must be an object, got {type(data).__name__}"
        raise ValueError(msg)
    raw_tag = data.get("tag")
    if not isinstance(raw_tag, str) or not raw_tag:
        msg = "Missing 'tag' field in serialized node"
        raise ValueError(msg)
    text = data.get("text")
    if text is not None and not isinstance(text, str):
        msg = f"'text' of {raw_tag} node must be a string, got {type(text).__name__}"
        raise ValueError(msg)
    children = data.get("children") or []
    if not isinstance(children, list):
        msg = f"'children' of {raw_tag} node must be a list"
        raise ValueError(msg)
    tag: str = Tag(raw_tag) if raw_tag in Tag.__members__ else raw_tag
    return DocNode(tag=tag, text=text, children=tuple(from_dict(c) for c in children))


def to_json(tree: DocNode, *, indent: int | None = None) -> str:
    """Serialize a tree to a JSON string.

    Args:
        tree: Root node.
        indent: JSON indentation level (None for compact).

    """
    return json.dumps(to_dict(tree), sort_keys=True, indent=indent)


def from_json(data: str) -> DocNode:
    """Deserialize a document tree from a JSON string.

    Raises:
        ValueError: If the JSON doesn't represent a DOCUMENT tree.

    """
    raw = json.loads(data)
    if not isinstance(raw, dict):
        msg = f"Expected a JSON object, got {type(raw).__name__}"
        raise ValueError(msg)
    tree = from_dict(raw)
    if tree.tag != Tag.DOCUMENT:
        msg = f"Expected DOCUMENT, got {tree.tag}"
        raise ValueError(msg)
    return tree


__all__ = ["from_dict", "from_json", "to_dict", "to_json"]
