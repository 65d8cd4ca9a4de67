"""Tests for reelcompose.timecode."""

import random

import pytest

from reelcompose.timecode import (
    clamp,
    clamp_time,
    format_duration,
    seconds_to_timecode,
    timecode_to_seconds,
)


class TestSecondsToTimecode:
    def test_zero(self):
        assert seconds_to_timecode(0) == "00:00.000"

    def test_minutes_and_millis(self):
        assert seconds_to_timecode(65.25) == "01:05.250"

    def test_hours_shown_when_needed(self):
        assert seconds_to_timecode(3725.5) == "01:02:05.500"

    def test_show_hours_forced(self):
        assert seconds_to_timecode(5, show_hours=True) == "00:00:05.000"

    def test_rounds_to_millisecond(self):
        # 59.9996 rounds up into the next minute rather than printing 60 seconds
        assert seconds_to_timecode(59.9996) == "01:00.000"

    def test_negative_is_zero(self):
        assert seconds_to_timecode(-3) == "00:00.000"


class TestTimecodeToSeconds:
    def test_plain_seconds(self):
        assert timecode_to_seconds("12.5") == 12.5

    def test_minutes_seconds(self):
        assert timecode_to_seconds("01:05.250") == pytest.approx(65.25)

    def test_hours_minutes_seconds(self):
        assert timecode_to_seconds("01:02:05.500") == pytest.approx(3725.5)

    def test_too_many_fields_raises(self):
        with pytest.raises(ValueError, match="Invalid timecode"):
            timecode_to_seconds("1:2:3:4")

    def test_non_numeric_raises(self):
        with pytest.raises(ValueError):
            timecode_to_seconds("ab:cd")

    def test_round_trip_within_a_millisecond(self):
        rng = random.Random(7)
        for _ in range(2000):
            s = rng.uniform(0, 86400)
            assert abs(timecode_to_seconds(seconds_to_timecode(s)) - s) <= 0.001


class TestClamp:
    def test_inside(self):
        assert clamp(5, 0, 10) == 5

    def test_below_and_above(self):
        assert clamp(-1, 0, 10) == 0
        assert clamp(11, 0, 10) == 10

    def test_clamp_time(self):
        assert clamp_time(75.0, 60.0) == 60.0
        assert clamp_time(-2.0, 60.0) == 0.0


class TestFormatDuration:
    def test_seconds(self):
        assert format_duration(42.9) == "42s"

    def test_minutes(self):
        assert format_duration(185) == "3m 5s"

    def test_hours(self):
        assert format_duration(4320) == "1h 12m"
