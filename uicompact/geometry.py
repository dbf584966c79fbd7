"""Bounds rectangles: parsing, formatting, visibility and center points.

Accessibility dumps describe geometry as ``[left,top][right,bottom]``.
Everything that needs to read that string goes through :class:`Bounds`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_BOUNDS_RE = re.compile(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]")


@dataclass(frozen=True)
class Bounds:
    """An on-screen pixel rectangle."""

    left: int
    top: int
    right: int
    bottom: int

    @classmethod
    def parse(cls, text: str | None) -> Bounds | None:
        """Parse ``[l,t][r,b]``; returns None for missing or malformed input."""
        if not text:
            return None
        match = _BOUNDS_RE.fullmatch(text)
        if match is None:
            return None
        left, top, right, bottom = (int(g) for g in match.groups())
        return cls(left, top, right, bottom)

    def format(self) -> str:
        return f"[{self.left},{self.top}][{self.right},{self.bottom}]"

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def center(self) -> tuple[int, int]:
        """Integer center point (floor division)."""
        return (self.left + self.right) // 2, (self.top + self.bottom) // 2

    def is_visible(self, screen_w: int, screen_h: int) -> bool:
        """Return True if at least one pixel overlaps ``[0, W) x [0, H)``."""
        return not (
            self.right <= 0  # fully left
            or self.left >= screen_w  # fully right
            or self.bottom <= 0  # fully above
            or self.top >= screen_h  # fully below
        )


def is_visible(bounds_text: str | None, screen_w: int, screen_h: int) -> bool:
    """Visibility test on a raw ``bounds`` attribute. Unparsable means invisible."""
    bounds = Bounds.parse(bounds_text)
    if bounds is None:
        return False
    return bounds.is_visible(screen_w, screen_h)
