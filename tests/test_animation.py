"""Tests for reelcompose.animation — progress, easing, transforms."""

from dataclasses import replace

import pytest

from reelcompose.animation import (
    IDENTITY,
    active_word_index,
    apply_text_transform,
    ease,
    progress,
    transform,
    visible_char_count,
    visible_text,
)
from reelcompose.models import DEFAULT_STYLE, EASINGS, AnimationSpec, Caption, WordTimestamp


def _caption(kind="fade", duration=0.5, delay=0.25, easing="easeOut", text="hello world"):
    style = replace(DEFAULT_STYLE, animation=AnimationSpec(kind, duration, delay, easing))
    return Caption("c", text, 10.0, 14.0, style=style)


class TestEase:
    @pytest.mark.parametrize("easing", sorted(EASINGS))
    def test_endpoints(self, easing):
        assert ease(0.0, easing) == 0.0
        assert ease(1.0, easing) == 1.0

    def test_quadratic_shapes(self):
        assert ease(0.5, "easeIn") == 0.25
        assert ease(0.5, "easeOut") == 0.75
        assert ease(0.25, "easeInOut") == 0.125
        assert ease(0.75, "easeInOut") == pytest.approx(0.875)
        assert ease(0.3, "linear") == 0.3


class TestProgress:
    def test_none_is_always_one(self):
        cap = _caption(kind="none")
        assert progress(cap, 0.0) == 1.0
        assert progress(cap, 10.0) == 1.0

    def test_zero_before_and_at_delay_start(self):
        cap = _caption()
        assert progress(cap, 9.0) == 0.0
        assert progress(cap, 10.1) == 0.0
        assert progress(cap, 10.25) == 0.0

    def test_one_at_and_after_end(self):
        cap = _caption()
        assert progress(cap, 10.75) == 1.0
        assert progress(cap, 13.0) == 1.0

    def test_zero_duration_jumps_to_one(self):
        cap = _caption(duration=0.0)
        assert progress(cap, 10.25) == 1.0

    @pytest.mark.parametrize("easing", sorted(EASINGS))
    def test_monotonic_and_bounded(self, easing):
        cap = _caption(easing=easing)
        values = [progress(cap, 9.5 + i * 0.005) for i in range(400)]
        assert all(0.0 <= v <= 1.0 for v in values)
        assert all(b >= a for a, b in zip(values, values[1:]))

    def test_replayable_in_any_order(self):
        cap = _caption(easing="easeInOut")
        times = [10.45, 10.25, 10.6, 10.3]
        forward = [progress(cap, t) for t in times]
        backward = [progress(cap, t) for t in reversed(times)]
        assert forward == list(reversed(backward))


class TestTransform:
    def test_fade(self):
        assert transform(_caption("fade"), 0.4).opacity == 0.4

    def test_slides(self):
        assert transform(_caption("slideLeft"), 0.0).translate_x == -100
        assert transform(_caption("slideRight"), 0.5).translate_x == 50
        assert transform(_caption("slideTop"), 0.0).translate_y == -50
        assert transform(_caption("slideBottom"), 1.0).translate_y == 0

    def test_scale(self):
        t = transform(_caption("scale"), 0.0)
        assert t.scale == 0.5 and t.opacity == 0.0
        assert transform(_caption("scale"), 1.0).scale == 1.0

    def test_typewriter_and_none_are_identity(self):
        assert transform(_caption("typewriter"), 0.3) == IDENTITY
        assert transform(_caption("none"), 0.3) == IDENTITY


class TestTypewriter:
    def test_char_count(self):
        assert visible_char_count("hello", 0.0) == 0
        assert visible_char_count("hello", 0.5) == 2
        assert visible_char_count("hello", 1.0) == 5

    def test_visible_text(self):
        cap = _caption("typewriter", duration=1.0, delay=0.0, easing="linear", text="abcd")
        assert visible_text(cap, 10.0) == ""
        assert visible_text(cap, 10.5) == "ab"
        assert visible_text(cap, 12.0) == "abcd"

    def test_non_typewriter_shows_all(self):
        assert visible_text(_caption("fade"), 10.0) == "hello world"


class TestKaraoke:
    def test_active_word(self):
        cap = Caption("c", "hi you", 1.0, 2.0, word_timestamps=(
            WordTimestamp("hi", 1.0, 1.5), WordTimestamp("you", 1.5, 2.0),
        ))
        assert active_word_index(cap, 1.2) == 0
        assert active_word_index(cap, 1.5) == 1
        assert active_word_index(cap, 2.5) is None


class TestTextTransform:
    def test_modes(self):
        assert apply_text_transform("hello World", "uppercase") == "HELLO WORLD"
        assert apply_text_transform("hello World", "lowercase") == "hello world"
        assert apply_text_transform("hello wORLD", "capitalize") == "Hello World"
        assert apply_text_transform("as is", "none") == "as is"
