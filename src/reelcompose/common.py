"""reelcompose.common — shared utilities for caption rendering and manifests.

Contains: color parsing (hex and CSS rgba), path variable resolution,
font loading, pixel-width text wrapping, and CLI logging setup.
"""

import logging
import re
from pathlib import Path

from PIL import ImageDraw, ImageFont


# ── Font paths ─────────────────────────────────────────────────────
# Noto Sans Arabic first so Arabic captions render, DejaVu Sans as fallback.

FONT_PATHS = [
    Path.home() / ".local/share/fonts/NotoSansArabic-Regular.ttf",
    Path("/usr/share/fonts/truetype/noto/NotoSansArabic-Regular.ttf"),
    Path.home() / ".local/share/fonts/Inter.ttc",
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
]

BOLD_FONT_PATHS = [
    Path("/usr/share/fonts/truetype/noto/NotoSansArabic-Bold.ttf"),
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
]

_RGBA_RE = re.compile(
    r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)"
)


# ── Color utilities ────────────────────────────────────────────────

def parse_hex_color(hex_str: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' or 'RRGGBB' string to (R, G, B) tuple."""
    hex_str = hex_str.lstrip("#")
    if len(hex_str) != 6 or not all(c in "0123456789abcdefABCDEF" for c in hex_str):
        raise ValueError(f"Invalid hex color: '#{hex_str}'")
    return (int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16))


def parse_css_color(value: str | None) -> tuple[int, int, int, int] | None:
    """Parse '#RRGGBB', 'rgb(...)' or 'rgba(...)' into an RGBA tuple.

    Returns None for None, empty strings and 'transparent' so callers
    can skip drawing.
    """
    if value is None:
        return None
    value = value.strip()
    if not value or value == "transparent":
        return None
    match = _RGBA_RE.fullmatch(value)
    if match:
        r, g, b, a = match.groups()
        alpha = 1.0 if a is None else min(max(float(a), 0.0), 1.0)
        return (int(r), int(g), int(b), round(alpha * 255))
    return (*parse_hex_color(value), 255)


# ── Path utilities ─────────────────────────────────────────────────

def resolve_path_vars(text: str, paths: dict[str, str]) -> str:
    """Replace ${name} variables in a string using the paths dict."""
    def _replace(match):
        key = match.group(1)
        if key not in paths:
            raise ValueError(f"Unknown path variable: ${{{key}}}")
        return paths[key]
    return re.sub(r"\$\{(\w+)\}", _replace, text)


# ── Font loading ───────────────────────────────────────────────────

def load_font(size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """Load the first available caption font at the given size.

    Bold tries the bold faces first and falls back to the regular list.
    """
    candidates = (BOLD_FONT_PATHS + FONT_PATHS) if bold else FONT_PATHS
    for font_path in candidates:
        if font_path.exists():
            try:
                return ImageFont.truetype(str(font_path), size=size, index=0)
            except (OSError, IndexError):
                continue
    # Last resort: Pillow default font, scalable on Pillow >= 10.1.
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        return ImageFont.load_default()


# ── Text measurement ───────────────────────────────────────────────

def text_width(draw: ImageDraw.ImageDraw, text: str, font) -> int:
    """Pixel width of a single line of text."""
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[2] - bbox[0]


def wrap_text(
    draw: ImageDraw.ImageDraw, text: str, font, max_width: float,
) -> list[str]:
    """Greedy word wrap so each line fits within max_width pixels.

    A single word wider than max_width gets a line of its own.
    """
    lines = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and text_width(draw, candidate, font) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines or [text]


# ── CLI utilities ──────────────────────────────────────────────────

def setup_logging(verbose: bool) -> None:
    """Route library log records to stderr; DEBUG when verbose, else WARNING."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
