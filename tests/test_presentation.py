"""Tests for reelcompose.presentation — virtualized timeline rows."""

import pytest

from reelcompose import timeline
from reelcompose.editor import ReelEditor
from reelcompose.models import Caption, TimelineState, TranscriptionSegment, TrimWindow
from reelcompose.presentation import (
    OVERSCAN,
    ROW_HEIGHT,
    VirtualTimeline,
    bar_geometry,
    click_row,
    drag_end_edge,
    drag_start_edge,
    merge_selected,
    nudge,
    ruler_labels,
    split_selected,
    toolbar_state,
    truncate_label,
)


def _many_segments(n):
    return [TranscriptionSegment(f"line number {i}", i * 1.0, i * 1.0 + 0.8) for i in range(n)]


@pytest.fixture
def editor():
    state = timeline.ingest(_many_segments(10), TrimWindow(0.0, 10.0), 20.0)
    return ReelEditor(state)


class TestVisibleRange:
    def test_top_of_list(self):
        vt = VirtualTimeline()
        # 560px viewport shows rows 0-9, plus 5 overscan below.
        assert vt.visible_range(0, 10 * ROW_HEIGHT, 1000) == range(0, 10 + OVERSCAN)

    def test_scrolled(self):
        vt = VirtualTimeline()
        r = vt.visible_range(100 * ROW_HEIGHT + 10, 5 * ROW_HEIGHT, 1000)
        assert r.start == 100 - OVERSCAN
        assert r.stop == 106 + OVERSCAN

    def test_end_of_list(self):
        vt = VirtualTimeline()
        r = vt.visible_range(995 * ROW_HEIGHT, 10 * ROW_HEIGHT, 1000)
        assert r.stop == 1000

    def test_empty(self):
        assert len(VirtualTimeline().visible_range(0, 500, 0)) == 0

    def test_total_height(self):
        assert VirtualTimeline().total_height(12) == 12 * ROW_HEIGHT

    def test_bad_row_height(self):
        with pytest.raises(ValueError, match="row_height"):
            VirtualTimeline(row_height=0)


class TestRows:
    def test_only_windowed_rows(self):
        state = timeline.ingest(_many_segments(200), TrimWindow(0.0, 200.0), 200.0)
        rows = VirtualTimeline().rows(state, scroll_top=50 * ROW_HEIGHT, viewport_height=3 * ROW_HEIGHT)
        assert rows[0].index == 50 - OVERSCAN
        assert len(rows) == 3 + 2 * OVERSCAN
        assert rows[0].top == rows[0].index * ROW_HEIGHT

    def test_row_fields(self, editor):
        editor.select(["caption-2"])
        rows = VirtualTimeline().rows(editor.state)
        row = rows[2]
        assert row.caption_id == "caption-2"
        assert row.left_pct == pytest.approx(20.0)
        assert row.width_pct == pytest.approx(8.0)
        assert row.start_label == "00:02.000"
        assert row.end_label == "00:02.800"
        assert row.selected and not rows[1].selected
        assert row.is_visible


class TestBarGeometry:
    def test_linear_map(self):
        left, width = bar_geometry(Caption("a", "x", 15.0, 20.0), TrimWindow(10.0, 30.0))
        assert (left, width) == (25.0, 25.0)

    def test_unclamped_outside(self):
        left, _ = bar_geometry(Caption("a", "x", 5.0, 6.0), TrimWindow(10.0, 20.0))
        assert left == -50.0
        left, _ = bar_geometry(Caption("a", "x", 25.0, 26.0), TrimWindow(10.0, 20.0))
        assert left == 150.0

    def test_zero_width_window(self):
        assert bar_geometry(Caption("a", "x", 5.0, 6.0), TrimWindow(10.0, 10.0)) == (0.0, 100.0)


class TestLabels:
    def test_truncate(self):
        assert truncate_label("x" * 40) == "x" * 40
        assert truncate_label("x" * 41) == "x" * 40 + "…"

    def test_ruler(self):
        labels = ruler_labels(TrimWindow(10.0, 30.0))
        assert labels[0] == (0.0, "00:10.000")
        assert labels[-1] == (100.0, "00:30.000")
        assert len(labels) == 5


class TestToolbar:
    def test_nothing_selected(self, editor):
        tb = toolbar_state(editor.state)
        assert not tb.can_split and not tb.can_merge and not tb.can_shift

    def test_single_selection_split_gate(self, editor):
        editor.select(["caption-1"])
        editor.set_playhead(1.4)
        tb = toolbar_state(editor.state)
        assert tb.can_split and tb.can_shift and not tb.can_merge

    def test_multi_selection(self, editor):
        editor.select(["caption-1", "caption-2"])
        tb = toolbar_state(editor.state)
        assert tb.can_merge and not tb.can_split


class TestHandlers:
    def test_click_selects_only(self, editor):
        click_row(editor, "caption-1")
        click_row(editor, "caption-2")
        assert editor.selection == ("caption-2",)

    def test_additive_click_toggles(self, editor):
        click_row(editor, "caption-1")
        click_row(editor, "caption-2", additive=True)
        assert editor.selection == ("caption-1", "caption-2")
        click_row(editor, "caption-1", additive=True)
        assert editor.selection == ("caption-2",)

    def test_drag_start_edge_keeps_end(self, editor):
        drag_start_edge(editor, "caption-3", 3.5)
        cap = editor.caption("caption-3")
        assert (cap.start_time, cap.end_time) == (3.5, 3.8)

    def test_drag_start_past_end_keeps_min(self, editor):
        drag_start_edge(editor, "caption-3", 9.0)
        cap = editor.caption("caption-3")
        assert cap.start_time == pytest.approx(3.7)

    def test_drag_end_edge(self, editor):
        drag_end_edge(editor, "caption-3", 4.5)
        assert editor.caption("caption-3").end_time == 4.5

    def test_drag_unknown_is_noop(self, editor):
        before = editor.state
        assert drag_end_edge(editor, "nope", 1.0) is before

    def test_nudge_shifts_selection(self, editor):
        editor.select(["caption-3"])
        nudge(editor, 100)
        assert editor.caption("caption-3").start_time == pytest.approx(3.1)
        nudge(editor, -200)
        assert editor.caption("caption-3").start_time == pytest.approx(2.9)

    def test_nudge_without_selection(self, editor):
        before = editor.state
        assert nudge(editor) is before

    def test_split_and_merge_selected(self, editor):
        editor.select(["caption-1"])
        editor.set_playhead(1.4)
        split_selected(editor)
        assert len(editor.captions()) == 11
        editor.select(["caption-1", "caption-10"])
        merge_selected(editor)
        assert len(editor.captions()) == 10
        assert editor.caption("caption-1").text == "line number 1"

    def test_handlers_go_through_editor(self, editor):
        click_row(editor, "caption-1")
        editor.set_playhead(1.4)
        split_selected(editor)
        assert editor.has_user_edits
        assert isinstance(editor.state, TimelineState)
