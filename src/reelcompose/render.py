"""Caption rendering for burned-in export.

Draws one caption as an RGBA patch with Pillow and alpha-blends it onto
a video frame. Called once per output frame through moviepy's
clip.transform, with the caption's source-video time. All animation
values come from reelcompose.animation, so the export shows exactly what
the preview shows at the same timestamp.

Style sizes are defined at the 1080px reference width and scaled to the
frame. Only one caption is drawn per frame: when captions overlap, the
most recently started one wins.
"""

import numpy as np
from PIL import Image, ImageDraw

from .animation import active_word_index, progress, transform, visible_text
from .common import load_font, parse_css_color, text_width, wrap_text
from .models import REFERENCE_WIDTH, Caption


# ── Constants ────────────────────────────────────────────────────

MAX_WIDTH_FRAC = 0.8          # caption box width limit, fraction of frame width
LINE_HEIGHT_FACTOR = 1.2      # line spacing relative to font size
MIN_FONT_PX = 8
BOLD_WEIGHTS = {"bold", "bolder", "600", "700", "800", "900"}


def _scaled(value: float, scale: float, floor: int = 0) -> int:
    return max(floor, round(value * scale))


def _line_x(align: str, box_w: int, line_w: int, pad_left: int, pad_right: int) -> int:
    if align == "left":
        return pad_left
    if align == "right":
        return box_w - pad_right - line_w
    return (box_w - line_w) // 2


# ── Patch rendering ──────────────────────────────────────────────


def render_caption_patch(
    caption: Caption, current_time: float, frame_w: int,
) -> np.ndarray | None:
    """Render a caption's text box as an RGBA array.

    Applies text transform, typewriter truncation and karaoke word
    highlighting for current_time. Opacity and motion are not applied
    here; see apply_captions_to_frame.

    Returns:
        Array of shape (h, w, 4), dtype uint8, or None when there is no
        text to show yet (typewriter at progress 0).
    """
    text = visible_text(caption, current_time)
    if not text.strip():
        return None

    style = caption.style
    scale = frame_w / REFERENCE_WIDTH
    font_px = _scaled(style.font_size, scale, MIN_FONT_PX)
    font = load_font(font_px, bold=str(style.font_weight) in BOLD_WEIGHTS)
    pad = style.padding
    pad_t, pad_r = _scaled(pad.top, scale), _scaled(pad.right, scale)
    pad_b, pad_l = _scaled(pad.bottom, scale), _scaled(pad.left, scale)
    stroke_w = _scaled(style.stroke_width, scale) if style.stroke_width else 0

    measure = ImageDraw.Draw(Image.new("RGBA", (1, 1)))
    max_text_w = frame_w * MAX_WIDTH_FRAC - pad_l - pad_r
    lines = wrap_text(measure, text, font, max_text_w)
    line_h = round(font_px * LINE_HEIGHT_FACTOR)
    line_widths = [text_width(measure, line, font) + 2 * stroke_w for line in lines]

    box_w = max(line_widths) + pad_l + pad_r
    box_h = len(lines) * line_h + pad_t + pad_b
    img = Image.new("RGBA", (box_w, box_h), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)

    background = parse_css_color(style.background_color)
    if background is not None:
        draw.rectangle([(0, 0), (box_w - 1, box_h - 1)], fill=background)

    fill = parse_css_color(style.color) or (255, 255, 255, 255)
    stroke_fill = parse_css_color(style.stroke_color) if stroke_w else None

    active = None
    if style.karaoke and caption.word_timestamps:
        active = active_word_index(caption, current_time)
    highlight = parse_css_color(style.karaoke_active_color) or fill

    word_index = 0
    space_w = text_width(measure, " ", font)
    for i, line in enumerate(lines):
        x = _line_x(style.text_align, box_w, line_widths[i], pad_l, pad_r) + stroke_w
        y = pad_t + i * line_h
        if active is None:
            draw.text((x, y), line, font=font, fill=fill,
                      stroke_width=stroke_w, stroke_fill=stroke_fill)
            continue
        # Karaoke: draw word by word so the active word gets its own color.
        for word in line.split(" "):
            color = highlight if word_index == active else fill
            draw.text((x, y), word, font=font, fill=color,
                      stroke_width=stroke_w, stroke_fill=stroke_fill)
            x += text_width(measure, word, font) + space_w
            word_index += 1

    return np.array(img)


# ── Frame-level application ──────────────────────────────────────


def pick_caption(captions, current_time: float) -> Caption | None:
    """The caption to draw at current_time: visible, active, latest start."""
    active = [
        c for c in captions
        if c.is_visible and c.start_time <= current_time <= c.end_time
    ]
    if not active:
        return None
    return min(active, key=lambda c: (-c.start_time, c.id))


def apply_captions_to_frame(
    frame: np.ndarray, captions, current_time: float,
) -> np.ndarray:
    """Composite the caption active at current_time onto a video frame.

    Args:
        frame: Input frame, shape (h, w, 3), dtype uint8.
        captions: Captions to choose from (any order).
        current_time: Time in source-video seconds.

    Returns:
        A new frame with the caption blended in, same shape and dtype.
    """
    caption = pick_caption(captions, current_time)
    if caption is None:
        return frame

    frame_h, frame_w = frame.shape[:2]
    anim = transform(caption, progress(caption, current_time))
    alpha_mul = anim.opacity * caption.style.opacity
    if alpha_mul <= 0:
        return frame

    patch = render_caption_patch(caption, current_time, frame_w)
    if patch is None:
        return frame

    if anim.scale != 1.0:
        ph, pw = patch.shape[:2]
        size = (max(1, round(pw * anim.scale)), max(1, round(ph * anim.scale)))
        patch = np.array(Image.fromarray(patch).resize(size, Image.BILINEAR))

    px_scale = frame_w / REFERENCE_WIDTH
    ph, pw = patch.shape[:2]
    cx = caption.position[0] * frame_w + anim.translate_x * px_scale
    cy = caption.position[1] * frame_h + anim.translate_y * px_scale
    x = round(cx - pw / 2)
    y = round(cy - ph / 2)

    # Clamp to frame bounds; crop patches larger than the frame.
    x = max(0, min(x, frame_w - pw))
    y = max(0, min(y, frame_h - ph))
    patch = patch[:frame_h - y, :frame_w - x]
    ph, pw = patch.shape[:2]

    result = frame.copy()
    alpha = patch[:, :, 3:4].astype(np.float32) / 255.0 * alpha_mul
    rgb = patch[:, :, :3].astype(np.float32)
    dest = result[y:y + ph, x:x + pw].astype(np.float32)
    blended = dest * (1 - alpha) + rgb * alpha
    result[y:y + ph, x:x + pw] = blended.astype(np.uint8)
    return result
