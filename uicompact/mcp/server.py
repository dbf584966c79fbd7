"""uicompact MCP Server: compact UI-tree tools for AI agents.

Exposes tools to render an accessibility dump as indexed text, resolve an
index to a tap point, and produce a filtered XML copy of a dump.
"""

from __future__ import annotations

import json
import os

from mcp.server.fastmcp import FastMCP

import uicompact

mcp = FastMCP(
    name="uicompact",
    instructions=(
        "uicompact turns a raw Android accessibility dump into a compact, "
        "indexed text view of the screen.\n\n"
        "WORKFLOW: follow this pattern:\n"
        "1. snapshot(dump) to get the indexed screen text\n"
        "2. tap_point(index) to get the x,y to tap for an element like [3]\n"
        "3. After the screen changes, snapshot again; lines starting with '* ' "
        "are elements that were not on the previous snapshot\n\n"
        "Indices (e.g., [3]) are ephemeral and only valid for the most recent "
        "snapshot. After any action, re-snapshot before using indices."
    ),
)

DEFAULT_SCREEN_W = int(os.environ.get("UICOMPACT_SCREEN_W", "1080"))
DEFAULT_SCREEN_H = int(os.environ.get("UICOMPACT_SCREEN_H", "2400"))

# ---------------------------------------------------------------------------
# Session state (one per MCP server process)
# ---------------------------------------------------------------------------

_session: uicompact.Session | None = None


def _get_session() -> uicompact.Session:
    global _session
    if _session is None:
        _session = uicompact.Session()
    return _session


def _error(message: str) -> str:
    return json.dumps({"success": False, "message": "", "error": message})


# ---------------------------------------------------------------------------
# Snapshot tools
# ---------------------------------------------------------------------------


@mcp.tool()
def snapshot(
    dump: str,
    width: int | None = None,
    height: int | None = None,
    diff: bool = True,
    pixels_above: int | None = None,
    pixels_below: int | None = None,
) -> str:
    """Render an accessibility dump as compact indexed text.

    Each interactive element gets an index; the format is:

        [index] text:"text" <resource-id> <This element is clickable.> <widget.Button>

    Indentation (tabs) shows the element hierarchy. Non-interactive
    elements appear only as their visible text.

    Indices are ephemeral. They are only valid for THIS snapshot.

    Args:
        dump: Raw accessibility dump XML (uiautomator format).
        width: Screen width in pixels (default: $UICOMPACT_SCREEN_W or 1080).
        height: Screen height in pixels (default: $UICOMPACT_SCREEN_H or 2400).
        diff: Mark elements not present in the previous snapshot with '* '.
        pixels_above: Scrollable content above the viewport, in pixels.
        pixels_below: Scrollable content below the viewport, in pixels.
    """
    session = _get_session()
    previous = session.last_keys if diff and session.last_result is not None else None
    result = session.render(
        dump,
        screen_w=width or DEFAULT_SCREEN_W,
        screen_h=height or DEFAULT_SCREEN_H,
        previous_keys=previous,
        pixels_above=pixels_above,
        pixels_below=pixels_below,
    )
    if not result.text:
        return "The screen is empty, or the dump could not be parsed."
    return result.text


@mcp.tool()
def filter_xml(dump: str, width: int | None = None, height: int | None = None) -> str:
    """Return a filtered XML copy of a dump with noise nodes removed.

    Use this when the full attribute set of the remaining elements is
    needed. Does not change the indices of the last snapshot.

    Args:
        dump: Raw accessibility dump XML.
        width: Screen width; when given with height, offscreen nodes are removed too.
        height: Screen height.
    """
    return _get_session().legacy_filter(dump, screen_w=width, screen_h=height)


# ---------------------------------------------------------------------------
# Element tools
# ---------------------------------------------------------------------------


@mcp.tool()
def tap_point(index: int) -> str:
    """Return the screen coordinates to tap for an element index.

    Args:
        index: Element index from the most recent snapshot (e.g., 3 for [3]).
    """
    session = _get_session()
    if session.last_result is None:
        return _error("No snapshot taken yet. Call snapshot first.")
    point = session.resolve_center(index)
    if point is None:
        return _error(f"Element [{index}] not found in the current snapshot or has no bounds.")
    return json.dumps(
        {
            "success": True,
            "message": session.describe(index),
            "x": point[0],
            "y": point[1],
        }
    )


@mcp.tool()
def describe(index: int) -> str:
    """Describe an element from the most recent snapshot.

    Args:
        index: Element index from the most recent snapshot.
    """
    description = _get_session().describe(index)
    if description is None:
        return _error(f"Element [{index}] not found in the current snapshot.")
    return json.dumps({"success": True, "message": description, "error": None})


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
