"""Tests for reelcompose.render — caption patches and frame compositing."""

from dataclasses import replace

import numpy as np
import pytest

from reelcompose.models import DEFAULT_POSITION, DEFAULT_STYLE, AnimationSpec, Caption, WordTimestamp
from reelcompose.render import apply_captions_to_frame, pick_caption, render_caption_patch


def _caption(cid="c", text="Hello reel", start=1.0, end=3.0, **style_changes):
    return Caption(cid, text, start, end, style=replace(DEFAULT_STYLE, **style_changes))


def _frame(w=540, h=960, value=0):
    return np.full((h, w, 3), value, dtype=np.uint8)


class TestRenderCaptionPatch:
    def test_rgba_patch(self):
        patch = render_caption_patch(_caption(), 2.0, 540)
        assert patch.ndim == 3 and patch.shape[2] == 4
        assert patch.dtype == np.uint8

    def test_background_box_alpha(self):
        patch = render_caption_patch(_caption(), 2.0, 540)
        # Corner pixel is background: rgba(0, 0, 0, 0.7).
        assert tuple(patch[0, 0]) == (0, 0, 0, round(0.7 * 255))

    def test_transparent_background(self):
        patch = render_caption_patch(_caption(background_color="transparent"), 2.0, 540)
        assert patch[0, 0, 3] == 0

    def test_scales_with_frame_width(self):
        small = render_caption_patch(_caption(), 2.0, 270)
        large = render_caption_patch(_caption(), 2.0, 1080)
        assert large.shape[0] > small.shape[0]

    def test_long_text_wraps_within_frame(self):
        text = " ".join(["caption"] * 40)
        patch = render_caption_patch(_caption(text=text), 2.0, 540)
        assert patch.shape[1] <= 540
        assert patch.shape[0] > render_caption_patch(_caption(), 2.0, 540).shape[0]

    def test_typewriter_empty_at_start(self):
        cap = _caption(animation=AnimationSpec("typewriter", 1.0, 0.0, "linear"))
        assert render_caption_patch(cap, 1.0, 540) is None
        assert render_caption_patch(cap, 1.5, 540) is not None

    def test_karaoke_highlight_differs(self):
        words = (WordTimestamp("Hello", 1.0, 2.0), WordTimestamp("reel", 2.0, 3.0))
        cap = replace(_caption(karaoke=True, background_color=""), word_timestamps=words)
        first = render_caption_patch(cap, 1.5, 540)
        second = render_caption_patch(cap, 2.5, 540)
        assert first.shape == second.shape
        assert not np.array_equal(first, second)


class TestPickCaption:
    def test_latest_start_wins(self):
        a = _caption("a", start=1.0, end=5.0)
        b = _caption("b", start=2.0, end=4.0)
        assert pick_caption([a, b], 3.0).id == "b"

    def test_hidden_skipped(self):
        a = replace(_caption("a"), is_visible=False)
        assert pick_caption([a], 2.0) is None

    def test_outside_interval(self):
        assert pick_caption([_caption()], 5.0) is None


class TestApplyCaptionsToFrame:
    def test_no_caption_returns_same_frame(self):
        frame = _frame()
        assert apply_captions_to_frame(frame, [_caption()], 10.0) is frame

    def test_draws_near_position(self):
        frame = _frame(value=200)
        out = apply_captions_to_frame(frame, [_caption()], 2.0)
        assert out.shape == frame.shape and out.dtype == np.uint8
        assert not np.array_equal(out, frame)
        # Default position is at 78% of the height; the top of the frame is untouched.
        assert np.array_equal(out[:100], frame[:100])
        cy = round(960 * DEFAULT_POSITION[1])
        assert not np.array_equal(out[cy], frame[cy])

    def test_input_frame_not_modified(self):
        frame = _frame(value=200)
        apply_captions_to_frame(frame, [_caption()], 2.0)
        assert (frame == 200).all()

    def test_fade_at_zero_progress_draws_nothing(self):
        cap = _caption(animation=AnimationSpec("fade", 0.5, 0.0, "linear"))
        frame = _frame(value=200)
        assert apply_captions_to_frame(frame, [cap], 1.0) is frame

    def test_fade_halfway_is_lighter_than_full(self):
        cap = _caption(animation=AnimationSpec("fade", 1.0, 0.0, "linear"))
        frame = _frame(value=200)
        half = apply_captions_to_frame(frame, [cap], 1.5).astype(int)
        full = apply_captions_to_frame(frame, [cap], 2.5).astype(int)
        assert np.abs(half - 200).sum() < np.abs(full - 200).sum()

    def test_position_clamped_inside_frame(self):
        cap = replace(_caption(), position=(1.0, 1.0))
        frame = _frame(value=200)
        out = apply_captions_to_frame(frame, [cap], 2.0)
        assert out.shape == frame.shape
        assert not np.array_equal(out[-1], frame[-1])

    @pytest.mark.parametrize("kind", ["slideLeft", "slideBottom", "scale"])
    def test_motion_animations_render(self, kind):
        cap = _caption(animation=AnimationSpec(kind, 1.0, 0.0, "linear"))
        out = apply_captions_to_frame(_frame(value=200), [cap], 1.5)
        assert out.shape == (960, 540, 3)
