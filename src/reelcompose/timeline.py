"""Timeline operations — pure transformations of a TimelineState.

Every operation takes a state and returns a new one; nothing is mutated
in place. Operations whose preconditions are not met (split with the
playhead outside the caption, merge with fewer than two captions,
unknown ids) return the input state object unchanged. Those are
disabled-button states in an editor, not errors. Only malformed input
such as an invalid trim window raises ReelValidationError.

Clamping rule shared by update_start_end and shift_captions:
  1. end   -> [trim.start + MIN_DURATION, trim.end]
  2. start -> [trim.start, end - MIN_DURATION]
  3. end   -> [start + MIN_DURATION, trim.end]
The trim window is itself at least MIN_DURATION long, so the result is
always inside the window and never shorter than MIN_DURATION.
"""

from dataclasses import replace

from .clip_input import normalize_segments, validate_trim_window
from .errors import ReelValidationError
from .models import (
    DEFAULT_POSITION,
    DEFAULT_STYLE,
    MIN_DURATION,
    TIME_EPSILON,
    Caption,
    CaptionStyle,
    TimelineState,
    TranscriptionSegment,
    TrimWindow,
    WordTimestamp,
)
from .timecode import clamp


# ── Helpers ───────────────────────────────────────────────────────


def _sort_key(caption: Caption) -> tuple[float, str]:
    return (caption.start_time, caption.id)


def _sorted(captions) -> tuple[Caption, ...]:
    return tuple(sorted(captions, key=_sort_key))


def _with_visibility(caption: Caption, trim: TrimWindow) -> Caption:
    visible = trim.overlaps(caption.start_time, caption.end_time)
    if visible == caption.is_visible:
        return caption
    return replace(caption, is_visible=visible)


def _replace_caption(state: TimelineState, new: Caption) -> TimelineState:
    captions = [new if c.id == new.id else c for c in state.captions]
    return replace(state, captions=_sorted(captions))


def clamp_interval(start: float, end: float, trim: TrimWindow) -> tuple[float, float]:
    """Clamp a caption interval into the trim window, keeping MIN_DURATION."""
    end = clamp(end, trim.start + MIN_DURATION, trim.end)
    start = clamp(start, trim.start, end - MIN_DURATION)
    end = clamp(end, start + MIN_DURATION, trim.end)
    return start, end


def sorted_captions(state: TimelineState) -> tuple[Caption, ...]:
    """Captions in (start_time, id) order."""
    return _sorted(state.captions)


def visible_captions_at(state: TimelineState, time: float) -> list[Caption]:
    """Visible captions active at time, most recently started first."""
    active = [
        c for c in state.captions
        if c.is_visible and c.start_time <= time <= c.end_time
    ]
    return sorted(active, key=lambda c: (-c.start_time, c.id))


# ── Ingest ────────────────────────────────────────────────────────


def ingest(
    segments: list[TranscriptionSegment] | tuple[TranscriptionSegment, ...],
    trim: TrimWindow,
    source_duration: float,
    style: CaptionStyle = DEFAULT_STYLE,
    position: tuple[float, float] = DEFAULT_POSITION,
) -> TimelineState:
    """Seed a session from transcription segments: one caption per segment.

    Visibility is the overlap test, so a segment straddling a trim edge
    is visible. Segments are kept even when they lie outside the window;
    widening the trim later brings them back.

    Raises:
        ReelValidationError: If the trim window is invalid.
    """
    validate_trim_window(trim, source_duration)
    captions = []
    for index, seg in enumerate(normalize_segments(segments)):
        captions.append(Caption(
            id=f"caption-{index}",
            text=seg.text,
            start_time=seg.start,
            end_time=seg.end,
            position=position,
            style=style,
            is_visible=trim.overlaps(seg.start, seg.end),
            language=seg.language,
            word_timestamps=tuple(seg.words),
        ))
    return TimelineState(
        source_duration=source_duration,
        trim=trim,
        captions=_sorted(captions),
        playhead=trim.start,
        next_id=len(captions),
    )


# ── Timing edits ──────────────────────────────────────────────────


def update_start_end(
    state: TimelineState, caption_id: str, new_start: float, new_end: float,
) -> TimelineState:
    """Move both edges of a caption, clamped into the trim window."""
    cap = state.caption(caption_id)
    if cap is None:
        return state
    start, end = clamp_interval(new_start, new_end, state.trim)
    updated = replace(cap, start_time=start, end_time=end)
    return _replace_caption(state, _with_visibility(updated, state.trim))


def shift_captions(
    state: TimelineState, caption_ids, delta_ms: float,
) -> TimelineState:
    """Translate each caption by delta_ms, then clamp each one on its own.

    Captions are clamped independently, so a group shifted against a
    trim edge can end up overlapping. Karaoke word times move by the
    distance the caption actually moved after clamping.
    """
    targets = set(caption_ids)
    if not targets or not any(c.id in targets for c in state.captions):
        return state
    delta = delta_ms / 1000.0

    captions = []
    for cap in state.captions:
        if cap.id not in targets:
            captions.append(cap)
            continue
        start, end = clamp_interval(cap.start_time + delta, cap.end_time + delta, state.trim)
        moved = start - cap.start_time
        words = tuple(
            WordTimestamp(w.text, w.start + moved, w.end + moved)
            for w in cap.word_timestamps
        )
        shifted = replace(cap, start_time=start, end_time=end, word_timestamps=words)
        captions.append(_with_visibility(shifted, state.trim))
    return replace(state, captions=_sorted(captions))


# ── Split / merge ─────────────────────────────────────────────────


def can_split(state: TimelineState, caption_id: str) -> bool:
    """Whether split_at_playhead would do anything for this caption.

    Needs the playhead strictly inside the caption, at least two words,
    and both halves at least MIN_DURATION long.
    """
    cap = state.caption(caption_id)
    if cap is None:
        return False
    t = state.playhead
    if not (cap.start_time < t < cap.end_time):
        return False
    if len(cap.text.split()) < 2:
        return False
    shortest = MIN_DURATION - TIME_EPSILON
    return t - cap.start_time >= shortest and cap.end_time - t >= shortest


def split_at_playhead(state: TimelineState, caption_id: str) -> TimelineState:
    """Split a caption in two at the playhead.

    The text is cut at the word boundary nearest the playhead's
    proportional position inside the caption. The first half keeps the
    id; the second half gets the next free id.
    """
    if not can_split(state, caption_id):
        return state
    cap = state.caption(caption_id)
    t = state.playhead
    tokens = cap.text.split()
    n = len(tokens)
    ratio = (t - cap.start_time) / (cap.end_time - cap.start_time)
    k = min(max(round(ratio * n), 1), n - 1)

    first = replace(
        cap,
        text=" ".join(tokens[:k]),
        end_time=t,
        word_timestamps=tuple(w for w in cap.word_timestamps if w.start < t),
    )
    second = replace(
        cap,
        id=f"caption-{state.next_id}",
        text=" ".join(tokens[k:]),
        start_time=t,
        word_timestamps=tuple(w for w in cap.word_timestamps if w.start >= t),
    )
    captions = [c for c in state.captions if c.id != cap.id]
    captions += [
        _with_visibility(first, state.trim),
        _with_visibility(second, state.trim),
    ]
    return replace(state, captions=_sorted(captions), next_id=state.next_id + 1)


def merge_captions(state: TimelineState, caption_ids) -> TimelineState:
    """Merge two or more captions into the chronologically earliest one.

    The survivor spans [min(starts), max(ends)], joins the texts in
    start order with single spaces, and keeps its own style and
    position. The absorbed ids are removed and the survivor becomes the
    whole selection.
    """
    wanted = set(caption_ids)
    members = sorted((c for c in state.captions if c.id in wanted), key=_sort_key)
    if len(members) < 2:
        return state

    host = members[0]
    merged = replace(
        host,
        text=" ".join(c.text.strip() for c in members),
        start_time=min(c.start_time for c in members),
        end_time=max(c.end_time for c in members),
        word_timestamps=tuple(w for c in members for w in c.word_timestamps),
    )
    captions = [c for c in state.captions if c.id not in wanted]
    captions.append(_with_visibility(merged, state.trim))
    return replace(state, captions=_sorted(captions), selection=(host.id,))


# ── Trim window and playhead ──────────────────────────────────────


def set_trim_window(state: TimelineState, window: TrimWindow) -> TimelineState:
    """Replace the trim window and recompute caption visibility.

    Caption times are left alone; the playhead is pulled into the new
    window.

    Raises:
        ReelValidationError: Window outside the source or shorter than 0.1s.
    """
    validate_trim_window(window, state.source_duration)
    captions = tuple(_with_visibility(c, window) for c in state.captions)
    return replace(
        state,
        trim=window,
        captions=captions,
        playhead=clamp(state.playhead, window.start, window.end),
    )


def set_playhead(state: TimelineState, time: float) -> TimelineState:
    return replace(state, playhead=clamp(time, state.trim.start, state.trim.end))


# ── Selection ─────────────────────────────────────────────────────


def select(state: TimelineState, caption_ids) -> TimelineState:
    """Replace the selection; unknown ids and duplicates are dropped."""
    known = {c.id for c in state.captions}
    selection = []
    for cid in caption_ids:
        if cid in known and cid not in selection:
            selection.append(cid)
    return replace(state, selection=tuple(selection))


def toggle_selection(state: TimelineState, caption_id: str) -> TimelineState:
    if caption_id in state.selection:
        return replace(
            state, selection=tuple(s for s in state.selection if s != caption_id),
        )
    if state.caption(caption_id) is None:
        return state
    return replace(state, selection=state.selection + (caption_id,))


def clear_selection(state: TimelineState) -> TimelineState:
    return replace(state, selection=())


# ── Content edits ─────────────────────────────────────────────────


def update_caption_text(state: TimelineState, caption_id: str, text: str) -> TimelineState:
    """Replace a caption's text.

    Karaoke word timings are kept only while the word count is unchanged.

    Raises:
        ReelValidationError: If text is blank.
    """
    if not text.strip():
        raise ReelValidationError("Caption text cannot be empty")
    cap = state.caption(caption_id)
    if cap is None:
        return state
    words = cap.word_timestamps
    tokens = text.split()
    if words and len(words) != len(tokens):
        words = ()
    elif words:
        words = tuple(replace(w, text=tok) for w, tok in zip(words, tokens))
    return _replace_caption(state, replace(cap, text=text.strip(), word_timestamps=words))


def update_caption_style(state: TimelineState, caption_id: str, **changes) -> TimelineState:
    cap = state.caption(caption_id)
    if cap is None:
        return state
    return _replace_caption(state, replace(cap, style=replace(cap.style, **changes)))


def update_caption_position(
    state: TimelineState, caption_id: str, x: float, y: float,
) -> TimelineState:
    """Move a caption; normalized coordinates are clamped to [0, 1]."""
    cap = state.caption(caption_id)
    if cap is None:
        return state
    position = (clamp(x, 0.0, 1.0), clamp(y, 0.0, 1.0))
    return _replace_caption(state, replace(cap, position=position))


def apply_style_to_all(state: TimelineState, style: CaptionStyle) -> TimelineState:
    captions = tuple(replace(c, style=style) for c in state.captions)
    return replace(state, captions=captions)


def delete_caption(state: TimelineState, caption_id: str) -> TimelineState:
    if state.caption(caption_id) is None:
        return state
    return replace(
        state,
        captions=tuple(c for c in state.captions if c.id != caption_id),
        selection=tuple(s for s in state.selection if s != caption_id),
    )
