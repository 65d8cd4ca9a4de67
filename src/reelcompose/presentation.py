"""Virtualized caption timeline — row layout for large caption lists.

Rows have a fixed height, so the index range under any scroll position
is computed directly rather than by walking the list. Only those rows
(plus an overscan margin) are laid out.

Bars map [trim.start, trim.end] linearly onto [0%, 100%]. Captions that
ended up outside the trim window after a window change get negative or
>100% values; this layer reports them as-is along with the caption's
visibility flag and leaves hiding or clamping to whoever draws them.

Interaction handlers never touch state directly: every change goes
through a ReelEditor method.
"""

import math
from dataclasses import dataclass

from .editor import ReelEditor
from .models import MIN_DURATION, Caption, TimelineState, TrimWindow
from .timecode import seconds_to_timecode
from .timeline import can_split, sorted_captions


# ── Layout constants ─────────────────────────────────────────────

ROW_HEIGHT = 56
OVERSCAN = 5
LABEL_MAX_CHARS = 40
NUDGE_STEP_MS = 100
RULER_TICKS = 5


@dataclass(frozen=True)
class TimelineRow:
    index: int
    caption_id: str
    top: int
    height: int
    left_pct: float
    width_pct: float
    label: str
    start_label: str
    end_label: str
    selected: bool
    is_visible: bool


@dataclass(frozen=True)
class ToolbarState:
    can_split: bool
    can_merge: bool
    can_shift: bool


def truncate_label(text: str, limit: int = LABEL_MAX_CHARS) -> str:
    return text if len(text) <= limit else f"{text[:limit]}…"


def bar_geometry(caption: Caption, trim: TrimWindow) -> tuple[float, float]:
    """(left %, width %) of a caption bar within the trim window. Unclamped."""
    span = trim.end - trim.start
    if span <= 0:
        return 0.0, 100.0
    left = (caption.start_time - trim.start) / span * 100
    width = (caption.end_time - caption.start_time) / span * 100
    return left, width


class VirtualTimeline:
    """Windowed row layout over a sorted caption list."""

    def __init__(self, row_height: int = ROW_HEIGHT, overscan: int = OVERSCAN):
        if row_height <= 0:
            raise ValueError(f"row_height must be positive, got {row_height}")
        self.row_height = row_height
        self.overscan = overscan

    def total_height(self, count: int) -> int:
        return count * self.row_height

    def visible_range(self, scroll_top: float, viewport_height: float, count: int) -> range:
        """Indices of rows intersecting the viewport, widened by overscan."""
        if count <= 0 or viewport_height <= 0:
            return range(0)
        scroll_top = max(0.0, scroll_top)
        first = int(scroll_top // self.row_height)
        last = math.ceil((scroll_top + viewport_height) / self.row_height) - 1
        start = max(0, first - self.overscan)
        stop = min(count, last + 1 + self.overscan)
        return range(start, max(start, stop))

    def rows(
        self, state: TimelineState, scroll_top: float = 0.0, viewport_height: float = 600.0,
    ) -> list[TimelineRow]:
        captions = sorted_captions(state)
        selected = set(state.selection)
        rows = []
        for i in self.visible_range(scroll_top, viewport_height, len(captions)):
            cap = captions[i]
            left, width = bar_geometry(cap, state.trim)
            rows.append(TimelineRow(
                index=i,
                caption_id=cap.id,
                top=i * self.row_height,
                height=self.row_height,
                left_pct=left,
                width_pct=width,
                label=truncate_label(cap.text),
                start_label=seconds_to_timecode(cap.start_time),
                end_label=seconds_to_timecode(cap.end_time),
                selected=cap.id in selected,
                is_visible=cap.is_visible,
            ))
        return rows


def toolbar_state(state: TimelineState) -> ToolbarState:
    """Which toolbar actions are enabled for the current selection."""
    selection = state.selection
    return ToolbarState(
        can_split=len(selection) == 1 and can_split(state, selection[0]),
        can_merge=len(selection) >= 2,
        can_shift=len(selection) >= 1,
    )


def ruler_labels(trim: TrimWindow, ticks: int = RULER_TICKS) -> list[tuple[float, str]]:
    """Evenly spaced (percent, timecode) marks across the trim window."""
    if trim.end <= trim.start or ticks < 2:
        return [(0.0, seconds_to_timecode(trim.start))]
    step = (trim.end - trim.start) / (ticks - 1)
    return [
        (i / (ticks - 1) * 100, seconds_to_timecode(trim.start + i * step))
        for i in range(ticks)
    ]


# ── Interaction handlers ─────────────────────────────────────────


def click_row(editor: ReelEditor, caption_id: str, additive: bool = False) -> TimelineState:
    """Plain click selects only this row; additive (ctrl/cmd) click toggles it."""
    if additive:
        return editor.toggle_selection(caption_id)
    return editor.select([caption_id])


def drag_start_edge(editor: ReelEditor, caption_id: str, start: float) -> TimelineState:
    cap = editor.caption(caption_id)
    if cap is None:
        return editor.state
    start = max(editor.trim.start, min(start, cap.end_time - MIN_DURATION))
    return editor.update_start_end(caption_id, start, cap.end_time)


def drag_end_edge(editor: ReelEditor, caption_id: str, end: float) -> TimelineState:
    cap = editor.caption(caption_id)
    if cap is None:
        return editor.state
    end = min(editor.trim.end, max(end, cap.start_time + MIN_DURATION))
    return editor.update_start_end(caption_id, cap.start_time, end)


def nudge(editor: ReelEditor, delta_ms: float = NUDGE_STEP_MS) -> TimelineState:
    """Shift every selected caption by delta_ms; no-op without a selection."""
    if not editor.selection:
        return editor.state
    return editor.shift_captions(editor.selection, delta_ms)


def split_selected(editor: ReelEditor) -> TimelineState:
    if not toolbar_state(editor.state).can_split:
        return editor.state
    return editor.split_at_playhead(editor.selection[0])


def merge_selected(editor: ReelEditor) -> TimelineState:
    if not toolbar_state(editor.state).can_merge:
        return editor.state
    return editor.merge_captions(editor.selection)
