"""
uicompact -- semantic UI-tree compression and diffing.

Turns a raw accessibility dump into compact, indexed text for an LLM and
resolves the indices it emits back to tap coordinates.

Quick start::

    import uicompact

    # Session is the primary API: render + coordinate lookup
    session = uicompact.Session()
    result = session.render(dump, screen_w=1080, screen_h=2400)
    print(result.text)                          # [1] text:"Login" <btn_login> ...
    x, y = session.resolve_center(1)            # tap point for [1]

    # Next screen: mark elements that were not there before
    result = session.render(next_dump, screen_w=1080, screen_h=2400,
                            previous_keys=session.last_keys)

    # Stateless building blocks
    result = uicompact.render(dump, screen_w=1080, screen_h=2400)
    xml = uicompact.legacy_filter(dump)         # filtered XML copy
"""

from __future__ import annotations

from uicompact._tree import Node, build_tree
from uicompact.format import (
    RenderResult,
    add_scroll_indicators,
    collect_keys,
    describe_element,
    is_interactive,
    is_semantically_important,
    legacy_filter,
    node_key,
    prune_tree,
    render,
    serialize_compact,
    serialize_xml,
)
from uicompact.geometry import Bounds, is_visible

__all__ = [
    "Session",
    "RenderResult",
    "render",
    "legacy_filter",
    # Advanced / building blocks
    "Node",
    "Bounds",
    "build_tree",
    "prune_tree",
    "serialize_compact",
    "serialize_xml",
    "add_scroll_indicators",
    "collect_keys",
    "describe_element",
    "is_interactive",
    "is_semantically_important",
    "is_visible",
    "node_key",
]


# ---------------------------------------------------------------------------
# Session: last render with index lookup
# ---------------------------------------------------------------------------


class Session:
    """Holds the most recent render so its indices can be resolved.

    Indices (e.g. ``[7]``) are ephemeral: each render replaces the index
    map, so an index is only valid for the text it appeared in.

    A session is not thread-safe. Either use one session per perception
    cycle, or make sure only one render/resolve call is in flight at a time.

    Example::

        session = uicompact.Session()
        result = session.render(dump, screen_w=1080, screen_h=2400)
        point = session.resolve_center(7)       # None if [7] was not emitted
    """

    def __init__(self) -> None:
        self._last: RenderResult | None = None

    @property
    def last_result(self) -> RenderResult | None:
        return self._last

    @property
    def elements(self) -> dict[int, Node]:
        """Index map of the most recent render (empty before the first one)."""
        if self._last is None:
            return {}
        return self._last.elements

    @property
    def last_keys(self) -> frozenset[str]:
        """Identity keys from the most recent render, for ``previous_keys``."""
        if self._last is None:
            return frozenset()
        return self._last.keys

    def render(
        self,
        dump: str,
        *,
        screen_w: int,
        screen_h: int,
        previous_keys: frozenset[str] | set[str] | None = None,
        pixels_above: int | None = None,
        pixels_below: int | None = None,
    ) -> RenderResult:
        """Render a dump and remember its index map.

        Args:
            dump: Raw accessibility dump text.
            screen_w: Screen width in pixels.
            screen_h: Screen height in pixels.
            previous_keys: Keys of a previous snapshot for new-element marking.
            pixels_above: When either scroll amount is given, the text is
                          framed with start/end-of-page or scroll hints.
            pixels_below: See ``pixels_above``.

        Returns:
            The RenderResult; also kept for :meth:`resolve_center`.
        """
        self._last = None
        result = render(
            dump,
            screen_w=screen_w,
            screen_h=screen_h,
            previous_keys=previous_keys,
        )
        if pixels_above is not None or pixels_below is not None:
            result.text = add_scroll_indicators(
                result.text,
                pixels_above=pixels_above or 0,
                pixels_below=pixels_below or 0,
            )
        self._last = result
        return result

    def resolve_center(self, index: int) -> tuple[int, int] | None:
        """Center ``(x, y)`` of element ``index`` from the most recent render.

        Returns None before any render, for an index the latest render did
        not emit, or when the element has no usable bounds.
        """
        if self._last is None:
            return None
        return self._last.center(index)

    def describe(self, index: int) -> str | None:
        """Summary line for element ``index``, or None if unknown."""
        if self._last is None:
            return None
        return self._last.describe(index)

    def legacy_filter(
        self,
        dump: str,
        *,
        screen_w: int | None = None,
        screen_h: int | None = None,
    ) -> str:
        """Filtered XML copy of a dump. Does not touch the index map."""
        return legacy_filter(dump, screen_w=screen_w, screen_h=screen_h)
