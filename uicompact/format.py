"""uicompact format utilities: tree pruning, compact text serializer, legacy XML.

Turns a raw accessibility dump into the line-oriented text an LLM reads,
plus the index map the actuator uses to turn ``[3]`` back into a tap point.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from xml.sax.saxutils import escape

from uicompact._tree import CONTAINER_TAG, Node, build_tree
from uicompact.geometry import Bounds

logger = logging.getLogger(__name__)

# Class-name prefix dropped from compact output ("android.widget.Button" -> "widget.Button").
PLATFORM_PREFIX = "android."

EDITABLE_CLASSES = frozenset(
    {
        "android.widget.EditText",
        "android.widget.AutoCompleteTextView",
        "android.widget.MultiAutoCompleteTextView",
    }
)

# Any of these set to "true" makes an enabled node interactive.
_ACTION_FLAGS = ("clickable", "long-clickable", "checkable", "scrollable", "focusable")

# Boolean attributes listed in the "This element is ..." summary, in this order.
_SUMMARY_FLAGS = (
    "checkable",
    "checked",
    "clickable",
    "enabled",
    "focusable",
    "focused",
    "scrollable",
    "long-clickable",
    "selected",
)

KEY_SEPARATOR = "|"
NEW_MARKER = "* "


# ---------------------------------------------------------------------------
# Node predicates
# ---------------------------------------------------------------------------


def visible_text(node: Node) -> str:
    """The node's text, falling back to its content description."""
    text = node.get("text")
    if text.strip():
        return text
    desc = node.get("content-desc")
    if desc.strip():
        return desc
    return ""


def is_semantically_important(node: Node) -> bool:
    """True if the node carries an id, text or content description."""
    return bool(
        node.get("resource-id").strip()
        or node.get("text").strip()
        or node.get("content-desc").strip()
    )


def is_interactive(node: Node) -> bool:
    """True if a user could plausibly tap, scroll or type into the node."""
    if node.get("enabled") == "false":
        return False
    if any(node.flag(name) for name in _ACTION_FLAGS):
        return True
    return node.get("class") in EDITABLE_CLASSES or node.flag("password")


def extra_info(node: Node) -> str:
    """Sentence listing the node's true boolean attributes, or ""."""
    parts = [name.replace("-", " ") for name in _SUMMARY_FLAGS if node.flag(name)]
    if not parts:
        return ""
    return f"This element is {', '.join(parts)}."


def node_key(node: Node) -> str:
    """Identity key used to diff snapshots: ``text|resource-id|class``."""
    return KEY_SEPARATOR.join((visible_text(node), node.get("resource-id"), node.get("class")))


def short_class(node: Node) -> str:
    return node.get("class").removeprefix(PLATFORM_PREFIX)


def describe_element(node: Node) -> str:
    """One-line summary of an element, as recorded after acting on it."""
    text = visible_text(node).replace("\n", " ")
    return f"text:{text} <{node.get('resource-id')}> <{extra_info(node)}> <{short_class(node)}>"


def _descendants(root: Node) -> Iterator[Node]:
    """Every node below ``root`` in document order; the root is never rendered."""
    nodes = root.iter()
    next(nodes)
    return nodes


def collect_keys(root: Node | None) -> frozenset[str]:
    """Identity keys of every node below ``root``, for the next render's diff."""
    if root is None:
        return frozenset()
    return frozenset(node_key(node) for node in _descendants(root))


def _count_nodes(root: Node) -> int:
    """Count the nodes below ``root``."""
    return sum(1 for _ in _descendants(root))


# ---------------------------------------------------------------------------
# Tree pruning
# ---------------------------------------------------------------------------


def _prune_node(node: Node, children: list[Node], screen: tuple[int, int] | None) -> list[Node]:
    """Prune a single node, returning 0 or more nodes to replace it.

    - ``children`` are the node's already-pruned children, in document order.
    - Offscreen nodes are removed and their pruned children promoted.
    - Nodes that are interactive, carry identifying info, or still have
      children are kept.
    - Anything else is an empty leaf and disappears.
    """
    if screen is not None:
        bounds = node.bounds
        if bounds is None or not bounds.is_visible(*screen):
            return children

    if is_semantically_important(node) or is_interactive(node) or children:
        return [node.with_children(children)]
    return children


def prune_tree(root: Node, *, screen: tuple[int, int] | None = None) -> Node:
    """Return a pruned copy of the tree; ``root`` itself is always kept.

    Children are pruned before their parent (post-order) using an explicit
    stack, so tree depth is not limited by the interpreter's recursion limit.

    Args:
        root: Tree root from :func:`build_tree`. It is not modified.
        screen: ``(width, height)``. When given, nodes entirely outside the
                screen are removed and their children promoted. When None,
                only uninformative nodes are removed.
    """
    # Each frame: (node, its unvisited children, its surviving children so far)
    stack: list[tuple[Node, Iterator[Node], list[Node]]] = [(root, iter(root.children), [])]
    while True:
        node, pending, kept = stack[-1]
        child = next(pending, None)
        if child is not None:
            stack.append((child, iter(child.children), []))
            continue

        stack.pop()
        if not stack:
            return root.with_children(kept)
        stack[-1][2].extend(_prune_node(node, kept, screen))


# ---------------------------------------------------------------------------
# Compact text serializer
# ---------------------------------------------------------------------------


def _emit_compact(
    node: Node,
    depth: int,
    lines: list[str],
    elements: dict[int, Node],
    previous_keys: frozenset[str] | set[str],
) -> None:
    """Emit the compact line (if any) for a single already-pruned node."""
    indent = "\t" * depth
    is_new = node_key(node) not in previous_keys and is_semantically_important(node)
    marker = NEW_MARKER if is_new else ""
    text = visible_text(node).replace("\n", " ")

    if is_interactive(node):
        index = len(elements) + 1
        elements[index] = node
        lines.append(
            f'{indent}{marker}[{index}] text:"{text}" '
            f"<{node.get('resource-id')}> <{extra_info(node)}> <{short_class(node)}>"
        )
    elif text:
        lines.append(f"{indent}{marker}{text}")


def serialize_compact(
    root: Node,
    *,
    previous_keys: frozenset[str] | set[str] | None = None,
) -> tuple[str, dict[int, Node]]:
    """Serialize an already-pruned tree to compact LLM-friendly text.

    Interactive nodes get sequential indices starting at 1 in document
    order; other nodes appear only when they have visible text.  Lines of
    semantically important nodes whose key is not in ``previous_keys``
    are prefixed with ``* ``.

    Returns:
        (text, elements) where elements maps each index to its node.
    """
    lines: list[str] = []
    elements: dict[int, Node] = {}
    keys = previous_keys if previous_keys is not None else frozenset()

    # Pre-order walk; children pushed in reverse so they pop in document order.
    stack = [(child, 0) for child in reversed(root.children)]
    while stack:
        node, depth = stack.pop()
        _emit_compact(node, depth, lines, elements, keys)
        stack.extend((child, depth + 1) for child in reversed(node.children))

    text = "".join(line + "\n" for line in lines)
    return text, elements


def add_scroll_indicators(text: str, *, pixels_above: int = 0, pixels_below: int = 0) -> str:
    """Frame compact text with start/end-of-page or scroll hints."""
    if not text.strip():
        return "The screen is empty or contains no interactive elements."

    if pixels_above > 0:
        head = f"... {pixels_above} pixels above - scroll up to see more ..."
    else:
        head = "[Start of page]"
    if pixels_below > 0:
        tail = f"... {pixels_below} pixels below - scroll down to see more ..."
    else:
        tail = "[End of page]"
    return f"{head}\n{text}\n{tail}"


# ---------------------------------------------------------------------------
# Legacy XML serializer
# ---------------------------------------------------------------------------

_QUOTES = {'"': "&quot;", "'": "&apos;"}


def _format_attrs(node: Node) -> str:
    return "".join(f' {name}="{escape(value, _QUOTES)}"' for name, value in node.attributes.items())


def serialize_xml(root: Node) -> str:
    """Re-emit a (pruned) tree as well-formed XML with escaped attributes."""
    lines = [f"<{CONTAINER_TAG}{_format_attrs(root)}>"]
    # Entries are (node, depth) still to open, or closing tags waiting their turn.
    stack: list[tuple[Node, int] | str] = [(child, 1) for child in reversed(root.children)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            lines.append(item)
            continue
        node, depth = item
        indent = "  " * depth
        if not node.children:
            lines.append(f"{indent}<node{_format_attrs(node)}/>")
            continue
        lines.append(f"{indent}<node{_format_attrs(node)}>")
        stack.append(f"{indent}</node>")
        stack.extend((child, depth + 1) for child in reversed(node.children))
    lines.append(f"</{CONTAINER_TAG}>")
    return "\n".join(lines) + "\n"


def legacy_filter(
    dump: str,
    *,
    screen_w: int | None = None,
    screen_h: int | None = None,
) -> str:
    """Prune a raw dump and return it as filtered XML.

    The visibility filter applies only when both screen dimensions are given.
    """
    root = build_tree(dump)
    if root is None:
        return f"<{CONTAINER_TAG}/>"
    screen = (screen_w, screen_h) if screen_w is not None and screen_h is not None else None
    return serialize_xml(prune_tree(root, screen=screen))


# ---------------------------------------------------------------------------
# Render: dump -> text + index map
# ---------------------------------------------------------------------------


@dataclass
class RenderResult:
    """Output of one render call.

    ``elements`` is only meaningful together with the ``text`` it was
    produced with; indices from an older result must not be mixed in.
    """

    text: str = ""
    elements: dict[int, Node] = field(default_factory=dict)
    keys: frozenset[str] = frozenset()
    nodes: int = 0
    nodes_before: int = 0

    def center(self, index: int) -> tuple[int, int] | None:
        """Center point of element ``index``, or None if unknown or unbounded."""
        node = self.elements.get(index)
        if node is None:
            return None
        bounds = node.bounds
        if bounds is None:
            return None
        return bounds.center

    def describe(self, index: int) -> str | None:
        node = self.elements.get(index)
        if node is None:
            return None
        return describe_element(node)

    def to_dict(self) -> dict:
        """JSON-ready form (see ``schema/render.schema.json``)."""
        elements = []
        for index, node in self.elements.items():
            center = self.center(index)
            bounds = node.bounds
            elements.append(
                {
                    "index": index,
                    "key": node_key(node),
                    "text": visible_text(node),
                    "resourceId": node.get("resource-id"),
                    "className": node.get("class"),
                    "bounds": bounds.format() if bounds else None,
                    "center": {"x": center[0], "y": center[1]} if center else None,
                }
            )
        return {
            "text": self.text,
            "elements": elements,
            "stats": {"nodes": self.nodes, "nodesBefore": self.nodes_before},
        }


def render(
    dump: str,
    *,
    screen_w: int,
    screen_h: int,
    previous_keys: frozenset[str] | set[str] | None = None,
) -> RenderResult:
    """Build, prune and serialize a raw accessibility dump.

    Pure function: every call builds a fresh index map.  Malformed input
    yields an empty result rather than an exception.

    Args:
        dump: Raw accessibility dump text.
        screen_w: Screen width in pixels.
        screen_h: Screen height in pixels.
        previous_keys: Identity keys from an earlier snapshot; nodes not in
                       the set are marked new. None is treated as empty.
    """
    root = build_tree(dump)
    if root is None:
        return RenderResult()

    total_before = _count_nodes(root)
    pruned = prune_tree(root, screen=(screen_w, screen_h))
    text, elements = serialize_compact(pruned, previous_keys=previous_keys)
    total_after = _count_nodes(pruned)
    logger.debug(
        "Rendered %d interactive elements, %d nodes (%d before pruning)",
        len(elements),
        total_after,
        total_before,
    )
    return RenderResult(
        text=text,
        elements=elements,
        keys=collect_keys(pruned),
        nodes=total_after,
        nodes_before=total_before,
    )
