"""CLI for uicompact: python -m uicompact DUMP"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time

from uicompact import Session, build_tree
from uicompact.format import legacy_filter

DEFAULT_SCREEN_W = 1080
DEFAULT_SCREEN_H = 2400


def _read_dump(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def _read_keys(path: str) -> set[str]:
    with open(path, encoding="utf-8") as f:
        return {line.rstrip("\n") for line in f if line.strip()}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="uicompact: compress an accessibility dump into indexed LLM text"
    )
    parser.add_argument("dump", help="Path to the accessibility dump XML ('-' for stdin)")
    parser.add_argument(
        "--width",
        type=int,
        default=int(os.environ.get("UICOMPACT_SCREEN_W", DEFAULT_SCREEN_W)),
        help="Screen width in pixels (default: $UICOMPACT_SCREEN_W or 1080)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=int(os.environ.get("UICOMPACT_SCREEN_H", DEFAULT_SCREEN_H)),
        help="Screen height in pixels (default: $UICOMPACT_SCREEN_H or 2400)",
    )
    parser.add_argument(
        "--previous-keys",
        type=str,
        default=None,
        help="File of identity keys (one per line) from a previous snapshot",
    )
    parser.add_argument(
        "--keys-out", type=str, default=None, help="Write this snapshot's identity keys to file"
    )
    parser.add_argument(
        "--pixels-above", type=int, default=None, help="Scrollable content above the viewport"
    )
    parser.add_argument(
        "--pixels-below", type=int, default=None, help="Scrollable content below the viewport"
    )
    parser.add_argument(
        "--center", type=int, default=None, help="Print the tap point of this element index"
    )
    parser.add_argument("--xml-out", type=str, default=None, help="Write filtered XML to file")
    parser.add_argument("--json-out", type=str, default=None, help="Write render JSON to file")
    parser.add_argument("--compact-out", type=str, default=None, help="Write compact text to file")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print diagnostics (timing, node counts, sizes)",
    )
    args = parser.parse_args(argv)

    verbose = args.verbose
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        dump = _read_dump(args.dump)
    except OSError as e:
        print(f"Cannot read dump: {e}", file=sys.stderr)
        return 1

    previous_keys = None
    if args.previous_keys:
        try:
            previous_keys = _read_keys(args.previous_keys)
        except OSError as e:
            print(f"Cannot read previous keys: {e}", file=sys.stderr)
            return 1

    if build_tree(dump) is None:
        print("No nodes found in dump (empty or malformed input)", file=sys.stderr)
        return 1

    if verbose:
        print(f"=== uicompact ({args.width}x{args.height}) ===")

    # -- Render --
    session = Session()
    t0 = time.perf_counter()
    result = session.render(
        dump,
        screen_w=args.width,
        screen_h=args.height,
        previous_keys=previous_keys,
        pixels_above=args.pixels_above,
        pixels_below=args.pixels_below,
    )
    t_render = (time.perf_counter() - t0) * 1000

    print(result.text, end="" if result.text.endswith("\n") else "\n")

    # -- Verbose diagnostics --
    if verbose:
        print(
            f"Rendered {result.nodes} nodes ({result.nodes_before} before pruning), "
            f"{len(result.elements)} interactive, in {t_render:.1f} ms"
        )
        raw_kb = len(dump) / 1024
        compact_kb = len(result.text) / 1024
        ratio = (1 - compact_kb / raw_kb) * 100 if raw_kb > 0 else 0
        print(f"Dump size: {raw_kb:.1f} KB | Compact size: {compact_kb:.1f} KB ({ratio:.0f}% smaller)")

    if args.center is not None:
        point = session.resolve_center(args.center)
        if point is None:
            print(f"Element [{args.center}] not found or has no bounds", file=sys.stderr)
            return 1
        print(f"[{args.center}] center: {point[0]},{point[1]}")

    # -- File output options --
    if args.keys_out:
        with open(args.keys_out, "w", encoding="utf-8") as f:
            f.writelines(f"{key}\n" for key in sorted(result.keys))
        if verbose:
            print(f"{len(result.keys)} keys written to {args.keys_out}")

    if args.json_out:
        with open(args.json_out, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        if verbose:
            print(f"JSON written to {args.json_out}")

    if args.xml_out:
        xml_str = legacy_filter(dump, screen_w=args.width, screen_h=args.height)
        with open(args.xml_out, "w", encoding="utf-8") as f:
            f.write(xml_str)
        if verbose:
            print(f"Filtered XML written to {args.xml_out} ({len(xml_str) / 1024:.1f} KB)")

    if args.compact_out:
        with open(args.compact_out, "w", encoding="utf-8") as f:
            f.write(result.text)
        if verbose:
            print(f"Compact written to {args.compact_out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
