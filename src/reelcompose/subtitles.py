"""Sidecar subtitle files — SRT and ASS built from the caption list.

Times are rebased to the trim start, so 00:00:00 is the first frame of
the exported reel. Only visible captions are written; a caption that
ends up empty after clamping negative times to zero is skipped.
"""

from .animation import apply_text_transform
from .common import parse_css_color
from .models import DEFAULT_STYLE, REFERENCE_HEIGHT, REFERENCE_WIDTH, Caption


def _rebased(caption: Caption, trim_start: float) -> tuple[float, float] | None:
    start = max(0.0, caption.start_time - trim_start)
    end = max(0.0, caption.end_time - trim_start)
    if end <= start:
        return None
    return start, end


def _events(captions, trim_start: float):
    ordered = sorted(
        (c for c in captions if c.is_visible), key=lambda c: (c.start_time, c.id),
    )
    for cap in ordered:
        span = _rebased(cap, trim_start)
        if span is not None:
            yield cap, span[0], span[1]


# ── SRT ──────────────────────────────────────────────────────────


def srt_timestamp(seconds: float) -> str:
    """HH:MM:SS,mmm"""
    total_ms = max(0, round(seconds * 1000))
    total_s, ms = divmod(total_ms, 1000)
    hours, rem = divmod(total_s, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{ms:03d}"


def build_srt(captions, trim_start: float) -> str:
    blocks = []
    for index, (cap, start, end) in enumerate(_events(captions, trim_start), 1):
        text = apply_text_transform(cap.text, cap.style.text_transform)
        blocks.append(f"{index}\n{srt_timestamp(start)} --> {srt_timestamp(end)}\n{text}\n")
    return "\n".join(blocks)


# ── ASS ──────────────────────────────────────────────────────────
# Colors are &HAABBGGRR with inverted alpha (00 = opaque).


def ass_timestamp(seconds: float) -> str:
    """H:MM:SS.cc"""
    total_cs = max(0, round(seconds * 100))
    total_s, cs = divmod(total_cs, 100)
    hours, rem = divmod(total_s, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}.{cs:02d}"


def ass_color(value: str | None, default: str = "&H00FFFFFF") -> str:
    rgba = parse_css_color(value)
    if rgba is None:
        return default
    r, g, b, a = rgba
    return f"&H{255 - a:02X}{b:02X}{g:02X}{r:02X}"


def _override_tags(color_tag: str, alpha_tag: str, value: str | None) -> str:
    """Inline color plus alpha override, e.g. \\1c&HBBGGRR&\\1a&HAA&."""
    rgba = parse_css_color(value)
    if rgba is None:
        return f"\\{alpha_tag}&HFF&"
    r, g, b, a = rgba
    return f"\\{color_tag}&H{b:02X}{g:02X}{r:02X}&\\{alpha_tag}&H{255 - a:02X}&"


def _escape_ass(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace("\n", "\\N")
        .replace("{", "\\{")
        .replace("}", "\\}")
    )


def build_ass(
    captions,
    trim_start: float,
    width: int = REFERENCE_WIDTH,
    height: int = REFERENCE_HEIGHT,
) -> str:
    """ASS script with one Default style and per-caption overrides.

    Each event is placed with \\pos at the caption's normalized position,
    and carries color and size overrides when they differ from the
    default style.
    """
    base = DEFAULT_STYLE
    scale = width / REFERENCE_WIDTH
    lines = [
        "[Script Info]",
        "Title: reelcompose captions",
        "ScriptType: v4.00+",
        "WrapStyle: 0",
        "ScaledBorderAndShadow: yes",
        f"PlayResX: {width}",
        f"PlayResY: {height}",
        "",
        "[V4+ Styles]",
        "Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, "
        "OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, "
        "ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, "
        "MarginL, MarginR, MarginV, Encoding",
        f"Style: Default,{base.font_family},{round(base.font_size * scale)},"
        f"{ass_color(base.color)},&H000000FF,"
        f"{ass_color(base.background_color, '&H80000000')},&H00000000,"
        "0,0,0,0,100,100,0,0,3,10,0,5,10,10,30,1",
        "",
        "[Events]",
        "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text",
    ]
    for cap, start, end in _events(captions, trim_start):
        style = cap.style
        tags = [f"\\pos({round(cap.position[0] * width)},{round(cap.position[1] * height)})"]
        if style.color != base.color:
            tags.append(_override_tags("1c", "1a", style.color))
        if style.font_size != base.font_size:
            tags.append(f"\\fs{round(style.font_size * scale)}")
        if style.background_color != base.background_color:
            tags.append(_override_tags("3c", "3a", style.background_color))
        if style.stroke_width:
            tags.append(f"\\bord{round(style.stroke_width * scale)}")
        text = _escape_ass(apply_text_transform(cap.text, style.text_transform))
        lines.append(
            f"Dialogue: 0,{ass_timestamp(start)},{ass_timestamp(end)},Default,,0,0,0,,"
            f"{{{''.join(tags)}}}{text}"
        )
    return "\n".join(lines) + "\n"
