"""Tree builder: raw accessibility dump -> :class:`Node` tree.

The dump is a container element (usually ``<hierarchy>``) wrapping nested
``<node>`` elements, each with an open set of string attributes::

    <hierarchy rotation="0">
        <node index="0" text="" resource-id="" class="android.widget.FrameLayout"
              clickable="false" enabled="true" bounds="[0,0][1080,2400]">
            <node ...>...</node>
        </node>
    </hierarchy>
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from uicompact.geometry import Bounds

logger = logging.getLogger(__name__)

NODE_TAG = "node"
CONTAINER_TAG = "hierarchy"

_EMPTY: Mapping[str, str] = MappingProxyType({})


@dataclass(eq=False)
class Node:
    """A single element of the accessibility tree.

    ``attributes`` is a read-only snapshot taken once at parse time, so
    nodes promoted during pruning can share it safely.  There is no parent
    pointer; ancestry is only ever needed during a tree walk.
    """

    attributes: Mapping[str, str] = field(default_factory=lambda: _EMPTY)
    children: list[Node] = field(default_factory=list)
    tag: str = NODE_TAG

    def get(self, name: str) -> str:
        """Attribute value, or "" when absent."""
        return self.attributes.get(name, "")

    def flag(self, name: str) -> bool:
        """Boolean attribute; anything but ``"true"`` is False."""
        return self.attributes.get(name) == "true"

    @property
    def bounds(self) -> Bounds | None:
        return Bounds.parse(self.attributes.get("bounds"))

    def with_children(self, children: list[Node]) -> Node:
        """Return a copy of this node sharing attributes but with new children."""
        return Node(attributes=self.attributes, children=children, tag=self.tag)

    def iter(self) -> Iterator[Node]:
        """Pre-order (document order) traversal, including this node."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def __repr__(self) -> str:
        parts = []
        text = self.get("text") or self.get("content-desc")
        if text.strip():
            parts.append(f"text={text!r}")
        if self.get("resource-id"):
            parts.append(f"id={self.get('resource-id')!r}")
        parts.append(f"children={len(self.children)}")
        return f"Node({' '.join(parts)})"


def _clean_dump(dump: str) -> str:
    """Normalize a raw dump before parsing.

    Non-breaking spaces become ordinary spaces.  Anything before the first
    tag or after the last one is discarded (``uiautomator dump /dev/tty``
    appends a "UI hierchary dumped to" trailer).
    """
    text = dump.replace("\u00a0", " ")
    start = text.find("<")
    end = text.rfind(">")
    if start == -1 or end < start:
        return ""
    return text[start : end + 1]


def _iter_events(text: str) -> Iterator[tuple[str, ET.Element]]:
    parser = ET.XMLPullParser(events=("start", "end"))
    parser.feed(text)
    yield from parser.read_events()
    parser.close()
    yield from parser.read_events()


def build_tree(dump: str) -> Node | None:
    """Build a node tree from a raw accessibility dump.

    Returns the single top-level ``node`` as the root.  When the container
    holds several top-level nodes the container itself becomes the root.
    Returns None for empty or malformed input; never raises for bad XML.
    """
    text = _clean_dump(dump)
    if not text:
        return None

    stack: list[Node] = []
    top_level: list[Node] = []
    container: Node | None = None
    count = 0

    try:
        for event, elem in _iter_events(text):
            if elem.tag != NODE_TAG:
                if event == "start" and container is None and not stack:
                    container = Node(attributes=MappingProxyType(dict(elem.attrib)), tag=elem.tag)
                continue

            if event == "start":
                node = Node(attributes=MappingProxyType(dict(elem.attrib)))
                if stack:
                    stack[-1].children.append(node)
                else:
                    top_level.append(node)
                stack.append(node)
                count += 1
            else:
                stack.pop()
                elem.clear()
    except ET.ParseError as e:
        logger.warning("Failed to parse accessibility dump: %s", e)
        return None

    if not top_level:
        logger.debug("Accessibility dump contains no %s elements", NODE_TAG)
        return None

    logger.debug("Built tree with %d nodes (%d top-level)", count, len(top_level))
    if len(top_level) == 1:
        return top_level[0]

    if container is None:
        container = Node(tag=CONTAINER_TAG)
    container.children.extend(top_level)
    return container
