"""Tests for bounds parsing, formatting, visibility and center points."""

from __future__ import annotations

import pytest

from uicompact.geometry import Bounds, is_visible

# ---------------------------------------------------------------------------
# Bounds.parse / Bounds.format
# ---------------------------------------------------------------------------


class TestParse:
    def test_basic(self):
        assert Bounds.parse("[0,66][1080,2400]") == Bounds(0, 66, 1080, 2400)

    def test_negative_coordinates(self):
        assert Bounds.parse("[-10,-10][5,5]") == Bounds(-10, -10, 5, 5)

    @pytest.mark.parametrize(
        "text",
        ["[0,0][10,10]", "[-50,-50][-10,-10]", "[100,0][150,50]"],
    )
    def test_format_round_trip(self, text):
        assert Bounds.parse(text).format() == text

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "[0,0][10]",
            "[0, 0][10,10]",
            " [0,0][10,10]",
            "[0,0][10,10] ",
            "[+1,0][10,10]",
            "[a,b][c,d]",
            "0,0,10,10",
        ],
    )
    def test_malformed_returns_none(self, text):
        assert Bounds.parse(text) is None

    def test_size(self):
        b = Bounds(10, 20, 30, 60)
        assert b.width == 20
        assert b.height == 40


# ---------------------------------------------------------------------------
# Center
# ---------------------------------------------------------------------------


class TestCenter:
    def test_center(self):
        assert Bounds.parse("[10,20][30,60]").center == (20, 40)

    def test_center_floors(self):
        assert Bounds(0, 0, 5, 7).center == (2, 3)

    def test_center_negative_floors(self):
        assert Bounds(-5, -5, 0, 0).center == (-3, -3)


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


class TestVisibility:
    def test_zero_rect_at_origin_not_visible(self):
        assert not is_visible("[0,0][0,0]", 100, 100)

    def test_partial_overlap_at_origin_visible(self):
        assert is_visible("[-10,-10][5,5]", 100, 100)

    def test_right_edge_exclusive(self):
        assert not is_visible("[100,0][150,50]", 100, 100)

    def test_bottom_edge_exclusive(self):
        assert not is_visible("[0,100][50,150]", 100, 100)

    def test_fully_left(self):
        assert not is_visible("[-50,-50][-10,-10]", 100, 200)

    def test_touching_left_edge(self):
        assert not is_visible("[-10,0][0,50]", 100, 100)

    def test_last_pixel_visible(self):
        assert is_visible("[99,99][200,200]", 100, 100)

    def test_fully_inside(self):
        assert is_visible("[10,20][30,60]", 100, 200)

    def test_larger_than_screen(self):
        assert is_visible("[-100,-100][500,500]", 100, 100)

    def test_missing_bounds_not_visible(self):
        assert not is_visible(None, 100, 100)

    def test_unparsable_bounds_not_visible(self):
        assert not is_visible("[0,0]", 100, 100)
