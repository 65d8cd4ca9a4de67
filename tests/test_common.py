"""Tests for reelcompose.common utilities."""

import pytest
from PIL import Image, ImageDraw

from reelcompose.common import (
    load_font,
    parse_css_color,
    parse_hex_color,
    resolve_path_vars,
    text_width,
    wrap_text,
)


class TestParseHexColor:
    def test_with_hash(self):
        assert parse_hex_color("#e04c77") == (224, 76, 119)

    def test_without_hash(self):
        assert parse_hex_color("1A1A1A") == (26, 26, 26)

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid hex color"):
            parse_hex_color("#12345")


class TestParseCssColor:
    def test_hex_opaque(self):
        assert parse_css_color("#FFFFFF") == (255, 255, 255, 255)

    def test_rgba(self):
        assert parse_css_color("rgba(0, 0, 0, 0.7)") == (0, 0, 0, 178)

    def test_rgb(self):
        assert parse_css_color("rgb(10,20,30)") == (10, 20, 30, 255)

    def test_alpha_clamped(self):
        assert parse_css_color("rgba(1, 2, 3, 4)")[3] == 255

    @pytest.mark.parametrize("value", [None, "", "  ", "transparent"])
    def test_no_color(self, value):
        assert parse_css_color(value) is None

    def test_garbage(self):
        with pytest.raises(ValueError):
            parse_css_color("blue-ish")


class TestResolvePathVars:
    def test_single_var(self):
        assert resolve_path_vars("${videos}/a.mp4", {"videos": "/data"}) == "/data/a.mp4"

    def test_no_vars(self):
        assert resolve_path_vars("/plain/path", {}) == "/plain/path"

    def test_unknown_var_raises(self):
        with pytest.raises(ValueError, match="Unknown path variable"):
            resolve_path_vars("${missing}/x", {})


class TestTextLayout:
    def test_load_font_sizes(self):
        draw = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
        small, large = load_font(12), load_font(48)
        assert text_width(draw, "caption", large) > text_width(draw, "caption", small)

    def test_bold_loads(self):
        assert load_font(20, bold=True) is not None

    def test_wrap_respects_width(self):
        draw = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
        font = load_font(24)
        lines = wrap_text(draw, "one two three four five six seven eight", font, 120)
        assert len(lines) > 1
        assert " ".join(lines) == "one two three four five six seven eight"

    def test_long_word_own_line(self):
        draw = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
        font = load_font(24)
        lines = wrap_text(draw, "a " + "x" * 60 + " b", font, 50)
        assert lines == ["a", "x" * 60, "b"]
