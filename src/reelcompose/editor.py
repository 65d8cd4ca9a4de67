"""ReelEditor — the single owner of an editing session's state.

Wraps the pure operations in reelcompose.timeline. Each public method
applies one operation and swaps in the resulting TimelineState, so every
edit is atomic: readers see either the old state or the new one. Nothing
else holds a reference to mutable editor state.
"""

from dataclasses import replace

from . import timeline
from .clip_input import validate_clip_input
from .models import (
    DEFAULT_STYLE,
    MIN_DURATION,
    Caption,
    CaptionStyle,
    ReelClipInput,
    TimelineState,
    TranscriptionSegment,
    TrimWindow,
)
from .timecode import clamp


class ReelEditor:
    """Editing session for one clip: captions, trim window, playhead, selection."""

    def __init__(
        self,
        state: TimelineState,
        segments: tuple[TranscriptionSegment, ...] = (),
        clip: ReelClipInput | None = None,
    ):
        self._state = state
        self._segments = tuple(segments)
        self.clip = clip
        self.has_user_edits = False

    @classmethod
    def from_clip_input(cls, clip: ReelClipInput) -> "ReelEditor":
        """Validate a clip proposal and seed captions from its transcription.

        Raises:
            ReelValidationError: Missing fields or an invalid trim window.
        """
        validate_clip_input(clip)
        state = timeline.ingest(
            clip.segments,
            TrimWindow(clip.start_time, clip.end_time),
            clip.source_video_duration,
            style=clip.style,
        )
        return cls(state, segments=clip.segments, clip=clip)

    # ── Read access ───────────────────────────────────────────────

    @property
    def state(self) -> TimelineState:
        return self._state

    @property
    def trim(self) -> TrimWindow:
        return self._state.trim

    @property
    def playhead(self) -> float:
        return self._state.playhead

    @property
    def selection(self) -> tuple[str, ...]:
        return self._state.selection

    def captions(self) -> tuple[Caption, ...]:
        return timeline.sorted_captions(self._state)

    def caption(self, caption_id: str) -> Caption | None:
        return self._state.caption(caption_id)

    def visible_captions(self) -> list[Caption]:
        return [c for c in self.captions() if c.is_visible]

    def active_captions(self, time: float | None = None) -> list[Caption]:
        t = self._state.playhead if time is None else time
        return timeline.visible_captions_at(self._state, t)

    def can_split(self, caption_id: str) -> bool:
        return timeline.can_split(self._state, caption_id)

    def export_settings(self) -> dict:
        return {
            "start_time": self.trim.start,
            "end_time": self.trim.end,
            "caption_styles": [c.style for c in self.captions()],
        }

    # ── Edits ─────────────────────────────────────────────────────

    def _apply(self, new_state: TimelineState, user_edit: bool = False) -> TimelineState:
        if user_edit and new_state is not self._state:
            self.has_user_edits = True
        self._state = new_state
        return new_state

    def update_start_end(self, caption_id: str, start: float, end: float) -> TimelineState:
        return self._apply(
            timeline.update_start_end(self._state, caption_id, start, end), user_edit=True,
        )

    def split_at_playhead(self, caption_id: str) -> TimelineState:
        return self._apply(timeline.split_at_playhead(self._state, caption_id), user_edit=True)

    def merge_captions(self, caption_ids) -> TimelineState:
        return self._apply(timeline.merge_captions(self._state, caption_ids), user_edit=True)

    def shift_captions(self, caption_ids, delta_ms: float) -> TimelineState:
        return self._apply(
            timeline.shift_captions(self._state, caption_ids, delta_ms), user_edit=True,
        )

    def update_caption_text(self, caption_id: str, text: str) -> TimelineState:
        return self._apply(
            timeline.update_caption_text(self._state, caption_id, text), user_edit=True,
        )

    def delete_caption(self, caption_id: str) -> TimelineState:
        return self._apply(timeline.delete_caption(self._state, caption_id), user_edit=True)

    def update_caption_style(self, caption_id: str, **changes) -> TimelineState:
        return self._apply(timeline.update_caption_style(self._state, caption_id, **changes))

    def update_caption_position(self, caption_id: str, x: float, y: float) -> TimelineState:
        return self._apply(timeline.update_caption_position(self._state, caption_id, x, y))

    def apply_style_to_all(self, style: CaptionStyle) -> TimelineState:
        return self._apply(timeline.apply_style_to_all(self._state, style))

    def set_trim_window(self, start: float, end: float) -> TimelineState:
        """Raises ReelValidationError for an invalid window; state is untouched."""
        return self._apply(timeline.set_trim_window(self._state, TrimWindow(start, end)))

    def update_trim_start(self, start: float) -> TimelineState:
        """Move the trim start, kept within the source and 0.1s before the end."""
        trim = self._state.trim
        start = clamp(start, 0.0, self._state.source_duration)
        start = max(0.0, min(start, trim.end - MIN_DURATION))
        return self.set_trim_window(start, trim.end)

    def update_trim_end(self, end: float) -> TimelineState:
        """Move the trim end, kept within the source and 0.1s after the start."""
        trim = self._state.trim
        end = clamp(end, 0.0, self._state.source_duration)
        end = min(self._state.source_duration, max(end, trim.start + MIN_DURATION))
        return self.set_trim_window(trim.start, end)

    def set_playhead(self, time: float) -> TimelineState:
        return self._apply(timeline.set_playhead(self._state, time))

    def select(self, caption_ids) -> TimelineState:
        return self._apply(timeline.select(self._state, caption_ids))

    def toggle_selection(self, caption_id: str) -> TimelineState:
        return self._apply(timeline.toggle_selection(self._state, caption_id))

    def clear_selection(self) -> TimelineState:
        return self._apply(timeline.clear_selection(self._state))

    def restore_original_captions(self) -> TimelineState:
        """Re-seed captions from the original transcription.

        Keeps the current trim window and playhead, and reuses the first
        caption's style and position so a restyled reel stays styled.
        """
        if not self._segments:
            return self._state
        current = self.captions()
        style = current[0].style if current else (self.clip.style if self.clip else DEFAULT_STYLE)
        kwargs = {"style": style}
        if current:
            kwargs["position"] = current[0].position
        fresh = timeline.ingest(
            self._segments, self._state.trim, self._state.source_duration, **kwargs,
        )
        self._state = replace(fresh, playhead=self._state.playhead)
        self.has_user_edits = False
        return self._state
