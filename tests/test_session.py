"""Tests for Session: render, index resolution and snapshot diffing."""

from __future__ import annotations

import uicompact
from uicompact import Session

LOGIN_SCREEN = """<?xml version='1.0' encoding='UTF-8' standalone='yes' ?>
<hierarchy rotation="0">
  <node index="0" text="" class="android.widget.FrameLayout" bounds="[0,0][100,200]">
    <node index="0" text="Login" resource-id="btn_login" class="android.widget.Button"
          clickable="true" enabled="true" bounds="[10,20][30,60]" />
    <node index="1" text="" class="android.widget.LinearLayout" clickable="false"
          bounds="[-50,-50][-10,-10]">
      <node index="0" text="Hidden Button" class="android.widget.Button" clickable="true"
            bounds="[5,5][15,15]" />
    </node>
  </node>
</hierarchy>"""

HOME_SCREEN = """<hierarchy rotation="0">
  <node class="android.widget.FrameLayout" bounds="[0,0][100,200]">
    <node text="Welcome" class="android.widget.TextView" bounds="[0,0][100,20]" />
    <node text="Login" resource-id="btn_login" class="android.widget.Button"
          clickable="true" enabled="true" bounds="[10,20][30,60]" />
    <node text="Settings" resource-id="btn_settings" class="android.widget.Button"
          clickable="true" enabled="true" bounds="[40,100][80,140]" />
  </node>
</hierarchy>"""


# ---------------------------------------------------------------------------
# Render + resolve
# ---------------------------------------------------------------------------


class TestSessionRender:
    def test_end_to_end(self):
        session = Session()
        result = session.render(LOGIN_SCREEN, screen_w=100, screen_h=200)
        assert result.text == (
            '* [1] text:"Login" <btn_login> <This element is clickable, enabled.> <widget.Button>\n'
            '* [2] text:"Hidden Button" <> <This element is clickable.> <widget.Button>\n'
        )
        assert session.resolve_center(2) == (10, 10)
        assert session.resolve_center(1) == (20, 40)

    def test_resolve_before_render(self):
        session = Session()
        assert session.resolve_center(1) is None
        assert session.describe(1) is None
        assert session.elements == {}
        assert session.last_keys == frozenset()

    def test_unknown_index(self):
        session = Session()
        session.render(LOGIN_SCREEN, screen_w=100, screen_h=200)
        assert session.resolve_center(0) is None
        assert session.resolve_center(3) is None

    def test_indices_replaced_by_next_render(self):
        session = Session()
        session.render(HOME_SCREEN, screen_w=100, screen_h=200)
        assert session.resolve_center(2) == (60, 120)
        session.render(LOGIN_SCREEN, screen_w=100, screen_h=200)
        assert session.resolve_center(2) == (10, 10)

    def test_failed_render_clears_indices(self):
        session = Session()
        session.render(LOGIN_SCREEN, screen_w=100, screen_h=200)
        result = session.render("<hierarchy><node>", screen_w=100, screen_h=200)
        assert result.text == ""
        assert session.resolve_center(1) is None

    def test_deterministic(self):
        a = Session().render(HOME_SCREEN, screen_w=100, screen_h=200)
        b = Session().render(HOME_SCREEN, screen_w=100, screen_h=200)
        assert a.text == b.text
        assert a.keys == b.keys

    def test_describe(self):
        session = Session()
        session.render(HOME_SCREEN, screen_w=100, screen_h=200)
        assert session.describe(2) == (
            "text:Settings <btn_settings> <This element is clickable, enabled.> <widget.Button>"
        )

    def test_module_level_render_matches_session(self):
        session = Session()
        assert (
            session.render(HOME_SCREEN, screen_w=100, screen_h=200).text
            == uicompact.render(HOME_SCREEN, screen_w=100, screen_h=200).text
        )


# ---------------------------------------------------------------------------
# Diffing
# ---------------------------------------------------------------------------


class TestSessionDiff:
    def test_chained_snapshots_mark_only_new(self):
        session = Session()
        session.render(LOGIN_SCREEN, screen_w=100, screen_h=200)
        result = session.render(
            HOME_SCREEN, screen_w=100, screen_h=200, previous_keys=session.last_keys
        )
        assert result.text.split("\n")[:-1] == [
            "* Welcome",
            '[1] text:"Login" <btn_login> <This element is clickable, enabled.> <widget.Button>',
            '* [2] text:"Settings" <btn_settings> <This element is clickable, enabled.> <widget.Button>',
        ]

    def test_same_screen_twice_has_no_markers(self):
        session = Session()
        session.render(HOME_SCREEN, screen_w=100, screen_h=200)
        result = session.render(
            HOME_SCREEN, screen_w=100, screen_h=200, previous_keys=session.last_keys
        )
        assert "* " not in result.text


# ---------------------------------------------------------------------------
# Scroll framing and legacy XML
# ---------------------------------------------------------------------------


class TestSessionExtras:
    def test_scroll_indicators(self):
        session = Session()
        result = session.render(
            HOME_SCREEN, screen_w=100, screen_h=200, pixels_above=0, pixels_below=300
        )
        lines = result.text.split("\n")
        assert lines[0] == "[Start of page]"
        assert lines[-1] == "... 300 pixels below - scroll down to see more ..."
        assert session.resolve_center(1) == (20, 40)

    def test_no_scroll_framing_by_default(self):
        result = Session().render(HOME_SCREEN, screen_w=100, screen_h=200)
        assert not result.text.startswith("[Start of page]")

    def test_legacy_filter_keeps_index_map(self):
        session = Session()
        session.render(HOME_SCREEN, screen_w=100, screen_h=200)
        xml = session.legacy_filter(LOGIN_SCREEN)
        assert xml.startswith("<hierarchy ")
        assert session.resolve_center(2) == (60, 120)
